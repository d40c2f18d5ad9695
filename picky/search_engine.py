"""
Search engine module.
Orchestrates one search: lexicon expansion, concurrent multi search over the
variants, AI intent classification, the optional similar-items lookup, the
recommendation call, then the merge, exclude filter, keyword boost and ordering.
"""

import asyncio  # concurrent collaborator calls
from typing import Any, List, Optional, Protocol, Set  # type annotations for clarity

# Import project modules for data structures and components
from . import settings  # runtime configuration
from .alias_index import AliasIndex, default_index  # lexicon lookups
from .classifier import IntentClassifier  # AI intent collaborator
from .errors import CollaboratorError, IntentClassificationError, RecommendationError, SearchCancelledError
from .expander import expand_query  # query variants
from .intent import build_plan, infer_signals  # plan construction
from .models import IntentSummary, MultiSearchResponse, ResultItem, SearchIntent, SearchPlan, SearchResponse
from .normalizer import from_search_hit, from_similar_hit  # per-source mapping
from .query_parser import QueryParser, extract_tags  # local query understanding
from .ranking import Ranker, title_similarity  # final ranking logic

# Import loguru for console logging
from loguru import logger  # simple structured logger

SIMILAR_TRIGGER_SCORE = 96  # top direct hit at or above this is treated as the title the user meant
SIMILAR_BASE_SCORE = 80  # base score of similar-items candidates


class Retriever(Protocol):
	async def search_multi(self, query: str, page: int = 1, language: Optional[str] = None, include_adult: bool = False) -> List[Any]:
		...

	async def similar(self, media_type: str, tmdb_id: int, page: int = 1, language: Optional[str] = None) -> List[Any]:
		...


class Recommender(Protocol):
	async def recommend(self, plan: SearchPlan) -> List[ResultItem]:
		...


class SearchEngine:
	"""
	High-level search API combining query expansion, retrieval, intent inference and ranking.
	Holds no per-request state: every call builds its own candidate lists.
	"""
	def __init__(
		self,
		retriever: Retriever,  # multi search + similar items (TMDB)
		classifier: IntentClassifier,  # AI intent estimate
		recommender: Recommender,  # discover engine, primary result source
		parser: Optional[QueryParser] = None,  # local heuristics
		index: Optional[AliasIndex] = None,  # lexicon index, built once per process
		language: str = settings.TMDB_LANGUAGE,
		region: str = settings.TMDB_REGION,
		max_variants: int = settings.MAX_QUERY_VARIANTS,
	):
		self.retriever = retriever
		self.classifier = classifier
		self.recommender = recommender
		self.index = index or default_index()
		self.parser = parser or QueryParser(index=self.index)
		self.ranker = Ranker()
		self.language = language
		self.region = region
		self.max_variants = max_variants
		logger.info(f"[Engine] Ready | language={language} | region={region} | max_variants={max_variants}")

	async def _retrieve(self, variants: List[str], page: int, language: str, include_adult: bool) -> List[ResultItem]:
		"""Multi search for every variant concurrently; a failing variant counts as no hits."""
		responses = await asyncio.gather(
			*(self.retriever.search_multi(v, page=page, language=language, include_adult=include_adult) for v in variants),
			return_exceptions=True,
		)
		items: List[ResultItem] = []
		seen = set()
		failed = 0
		# variant order, not completion order
		for variant, response in zip(variants, responses):
			if isinstance(response, BaseException):
				if not isinstance(response, Exception):
					raise response
				failed += 1
				logger.warning(f"[Engine] Variant '{variant}' failed, ignoring: {response}")
				continue
			for raw in response:
				item = from_search_hit(raw)
				if item is None or item.key in seen:
					continue
				seen.add(item.key)
				items.append(item)
		logger.debug(f"[Engine] Retrieved {len(items)} hits from {len(variants) - failed}/{len(variants)} variants")
		return items

	async def _direct_hits(self, query: str, variants: List[str]) -> List[ResultItem]:
		hits = await self._retrieve(variants, 1, self.language, False)
		direct = [item for item in hits if item.poster_path]
		for item in direct:
			score = title_similarity(query, item.title)
			item.match_score = score
			item.reasons = [f"제목 일치 {score}"]
		direct.sort(key=lambda it: -it.match_score)
		return direct

	async def _similar_items(self, top: Optional[ResultItem]) -> List[ResultItem]:
		"""Similar items of a near-exact title hit; failures degrade to no items."""
		if top is None or top.match_score < SIMILAR_TRIGGER_SCORE:
			return []
		try:
			raw = await self.retriever.similar(top.media_type, top.id, page=1, language=self.language)
		except Exception as e:
			logger.warning(f"[Engine] Similar items for {top.media_type}:{top.id} failed, ignoring: {e}")
			return []
		items: List[ResultItem] = []
		for hit in raw:
			item = from_similar_hit(hit, top.media_type)
			if item is None:
				continue
			item.match_score = SIMILAR_BASE_SCORE
			item.reasons = ["비슷한 작품"]
			items.append(item)
		logger.debug(f"[Engine] {len(items)} similar items for '{top.title}'")
		return items

	async def _recommend(self, plan: SearchPlan) -> List[ResultItem]:
		try:
			return await self.recommender.recommend(plan)
		except RecommendationError:
			raise
		except CollaboratorError as e:
			logger.error(f"[Engine] Recommendation failed: {e}")
			raise RecommendationError(str(e)) from e

	async def search(self, query: str, limit: int = settings.DEFAULT_LIMIT) -> SearchResponse:
		"""
		Run a full search.

		Raises:
			IntentClassificationError: the AI classification failed
			RecommendationError: the recommendation engine failed
		"""
		q = (query or "").strip()
		if not q:
			logger.debug("[Engine] Empty query, nothing to do")
			return SearchResponse(intent_summary=None, tags=[], results=[], expanded_queries=[])

		variants = expand_query(q, self.max_variants, index=self.index)
		logger.info(f"[Engine] Search '{q}' | variants={variants}")

		# classification runs while the variants are being retrieved
		classify_task = asyncio.ensure_future(self.classifier.classify(q, self.language, self.region))
		try:
			direct = await self._direct_hits(q, variants)
			try:
				intent = await classify_task
			except IntentClassificationError as e:
				logger.error(f"[Engine] Intent classification failed: {e}")
				raise
		finally:
			if not classify_task.done():
				classify_task.cancel()

		parsed = self.parser.parse(q)
		signals = infer_signals(q, intent.include_keywords, index=self.index)
		plan = build_plan(q, intent, parsed, signals, region=self.region, language=self.language, index=self.index)

		top = direct[0] if direct else None
		similar_task = asyncio.ensure_future(self._similar_items(top))
		try:
			recommended = await self._recommend(plan)
			similar = await similar_task
		finally:
			if not similar_task.done():
				similar_task.cancel()

		# dedup priority: direct -> similar -> recommended, first occurrence wins
		merged: List[ResultItem] = []
		seen: Set = set()
		for item in direct + similar + recommended:
			if item.key in seen:
				continue
			seen.add(item.key)
			merged.append(item)

		kept = self.ranker.apply_exclude(merged, plan.exclude_keywords)
		self.ranker.apply_boost(kept, plan.include_keywords)
		results = self.ranker.order(kept, limit)

		summary = IntentSummary(
			plan=plan,
			confidence=intent.confidence,
			needs_clarification=intent.needs_clarification,
			clarifying_question=intent.clarifying_question,
			used_ai_media_types=intent.confidence >= settings.INTENT_CONFIDENCE_MIN and bool(intent.media_types),
		)
		logger.info(
			f"[Engine] Returning {len(results)} of {len(merged)} merged results "
			f"(direct={len(direct)}, similar={len(similar)}, recommended={len(recommended)})"
		)
		return SearchResponse(intent_summary=summary, tags=extract_tags(q), results=results, expanded_queries=variants)

	async def recommend(self, prompt: str, intent: Optional[SearchIntent] = None, page: int = 1) -> List[ResultItem]:
		"""
		Recommendation call alone, for callers that already know (part of) the intent.
		Without an explicit intent the local heuristics decide everything.

		Raises:
			RecommendationError: the recommendation engine failed
		"""
		p = (prompt or "").strip()
		if not p:
			return []
		intent = intent or SearchIntent()
		signals = infer_signals(p, intent.include_keywords, index=self.index)
		plan = build_plan(p, intent, self.parser.parse(p), signals, region=self.region, language=self.language, index=self.index)
		plan.page = max(1, page)
		return await self._recommend(plan)

	async def search_multi(
		self,
		query: str,
		page: int = 1,
		language: Optional[str] = None,
		include_adult: bool = False,
	) -> MultiSearchResponse:
		"""Lexicon-expanded multi search without intent inference or ranking."""
		q = (query or "").strip()
		if not q:
			return MultiSearchResponse(expanded_queries=[], results=[])
		variants = expand_query(q, self.max_variants, index=self.index)
		results = await self._retrieve(variants, page, language or self.language, include_adult)
		return MultiSearchResponse(expanded_queries=variants, results=results)


class SearchSession:
	"""
	Last-request-wins wrapper for one logical caller (a search box, a websocket).
	Starting a search cancels the one still in flight; its awaiter gets SearchCancelledError.
	"""
	def __init__(self, engine: SearchEngine):
		self.engine = engine
		self._current: Optional[asyncio.Task] = None
		self._superseded: Set[asyncio.Task] = set()

	async def search(self, query: str, limit: int = settings.DEFAULT_LIMIT) -> SearchResponse:
		self.cancel()
		task = asyncio.ensure_future(self.engine.search(query, limit))
		self._current = task
		try:
			return await task
		except asyncio.CancelledError:
			if task in self._superseded:
				raise SearchCancelledError(f"search '{query}' was cancelled") from None
			raise
		finally:
			self._superseded.discard(task)
			if self._current is task:
				self._current = None

	def cancel(self) -> bool:
		"""Cancel the in-flight search, if any. Returns whether one was cancelled."""
		task = self._current
		if task is None or task.done():
			return False
		self._superseded.add(task)
		task.cancel()
		logger.debug("[Engine] In-flight search cancelled")
		return True
