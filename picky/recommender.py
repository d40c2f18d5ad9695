"""
Recommendation engine.
Turns a SearchPlan into scored TMDB discover candidates: resolves company and keyword
ids, calls discover once per media type, filters excluded titles, scores every
candidate and enriches the top ones with provider badges and an age rating.
"""

import asyncio
import math
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from . import settings
from .errors import CollaboratorError, RecommendationError
from .lexicon import normalize, uniq_strings
from .models import MEDIA_TYPES, ResultItem, SearchPlan
from .normalizer import from_discover_hit, provider_badges
from .tmdb import TmdbClient

MAX_COMPANY_HINTS = 16
MAX_COMPANY_IDS = 10
MAX_KEYWORD_IDS = 12
MAX_SCORE_TOKENS = 26
MAX_RESULTS = 24
MAX_REASONS = 6


def contains_any(hay_lower: str, tokens: Sequence[str]) -> List[str]:
	"""Normalized tokens (2+ chars) found as substrings of an already lowercased text."""
	hits: List[str] = []
	for token in tokens:
		t = normalize(token)
		if len(t) >= 2 and t in hay_lower:
			hits.append(t)
	return hits


def pick_keyword_queries(keywords: Sequence[str]) -> List[str]:
	"""TMDB keywords are English: ASCII keywords first (8), then a few others (4)."""
	ascii_kw = [k for k in uniq_strings(keywords) if k.isascii()]
	other_kw = [k for k in uniq_strings(keywords) if not k.isascii()]
	return ascii_kw[:8] + other_kw[:4]


def score_candidate(
	item: ResultItem,
	tokens: Sequence[str],
	not_tokens: Sequence[str],
	year_from: Optional[int] = None,
	year_to: Optional[int] = None,
) -> Tuple[int, List[str]]:
	"""
	Server-side match score of a candidate, in [0, 100], with its reasons.
	A low base keeps popular titles from winning on popularity alone.
	"""
	score = 18.0
	reasons: List[str] = []
	hay = item.text

	hits = contains_any(hay, tokens)
	if hits:
		add = min(len(hits) * 12, 52)
		score += add
		reasons.append(f"키워드 일치 +{add}")
	else:
		score -= 8
		reasons.append("키워드 미일치 -8")

	bad = contains_any(hay, not_tokens)
	if bad:
		sub = min(len(bad) * 20, 60)
		score -= sub
		reasons.append(f"제외 키워드 -{sub}")

	year = item.year
	if year and year_from and year_to and year_from <= year <= year_to:
		score += 10
		reasons.append("연도 일치 +10")

	if item.vote_average > 0:
		score += min(max(item.vote_average, 0.0), 10.0) * 0.6
	if item.vote_count > 0:
		score += min(math.log10(item.vote_count + 1) * 2.2, 7.0)

	score = max(0.0, min(100.0, score))
	return int(round(score)), uniq_strings(reasons)[:MAX_REASONS]


def discover_params(
	media_type: str,
	plan: SearchPlan,
	keyword_ids: Sequence[int] = (),
	company_ids: Sequence[int] = (),
) -> Dict[str, str]:
	"""Query string of a TMDB discover call for one media type."""
	params = {
		"language": plan.language,
		"region": plan.region,
		"include_adult": "true" if plan.include_adult else "false",
		"sort_by": "popularity.desc",
		"page": str(plan.page),
	}
	if plan.genre_ids:
		params["with_genres"] = ",".join(str(g) for g in plan.genre_ids)
	date_field = "primary_release_date" if media_type == "movie" else "first_air_date"
	if plan.year_from:
		params[f"{date_field}.gte"] = f"{plan.year_from}-01-01"
	if plan.year_to:
		params[f"{date_field}.lte"] = f"{plan.year_to}-12-31"
	if plan.original_language:
		params["with_original_language"] = plan.original_language
	if keyword_ids:
		params["with_keywords"] = "|".join(str(k) for k in keyword_ids)
	# tv discover has no company filter
	if media_type == "movie" and company_ids:
		params["with_companies"] = "|".join(str(c) for c in company_ids)
	return params


class DiscoverRecommender:
	"""Recommendation engine over TMDB discover."""

	def __init__(self, tmdb: TmdbClient, enrich_concurrency: int = settings.ENRICH_CONCURRENCY):
		self.tmdb = tmdb
		self.enrich_concurrency = max(1, enrich_concurrency)
		# name -> id (None when TMDB knows no such entity); lives for the process
		self._company_ids: Dict[str, Optional[int]] = {}
		self._keyword_ids: Dict[str, Optional[int]] = {}

	async def _lookup(self, cache: Dict[str, Optional[int]], name: str, kind: str) -> Optional[int]:
		key = normalize(name)
		if key in cache:
			return cache[key]
		try:
			if kind == "company":
				found = await self.tmdb.search_company(name)
			else:
				found = await self.tmdb.search_keyword(name)
		except CollaboratorError as e:
			logger.warning(f"[Recommender] {kind} lookup '{name}' failed: {e}")
			return None  # not cached, retried next time
		cache[key] = found
		return found

	async def _resolve_ids(self, cache: Dict[str, Optional[int]], names: Sequence[str], kind: str, cap: int) -> List[int]:
		found = await asyncio.gather(*(self._lookup(cache, n, kind) for n in names))
		ids: List[int] = []
		for value in found:
			if value is not None and value not in ids:
				ids.append(value)
		return ids[:cap]

	async def _discover(self, media_type: str, plan: SearchPlan, keyword_ids: List[int], company_ids: List[int]) -> List[ResultItem]:
		raw = await self.tmdb.discover(media_type, discover_params(media_type, plan, keyword_ids, company_ids))
		items = [from_discover_hit(hit, media_type) for hit in raw]
		return [item for item in items if item is not None]

	async def _enrich(self, items: List[ResultItem], region: str) -> None:
		sem = asyncio.Semaphore(self.enrich_concurrency)

		async def bounded_enrich(item: ResultItem) -> None:
			async with sem:
				try:
					item.providers = provider_badges(await self.tmdb.watch_providers(item.media_type, item.id, region))
				except CollaboratorError as e:
					logger.warning(f"[Recommender] Providers for {item.media_type}:{item.id} failed: {e}")
					item.providers = []
				try:
					item.age_rating = await self.tmdb.age_rating(item.media_type, item.id, region)
				except CollaboratorError as e:
					logger.warning(f"[Recommender] Age rating for {item.media_type}:{item.id} failed: {e}")
					item.age_rating = None

		await asyncio.gather(*(bounded_enrich(item) for item in items))

	async def recommend(self, plan: SearchPlan) -> List[ResultItem]:
		"""
		Scored discover candidates for a plan.

		Raises:
			RecommendationError: a discover call failed
		"""
		media_types = [m for m in plan.media_types if m in MEDIA_TYPES] or list(MEDIA_TYPES)

		company_names = uniq_strings(plan.company_queries)[:MAX_COMPANY_HINTS]
		keyword_names = pick_keyword_queries(plan.include_keywords)
		company_ids, keyword_ids = await asyncio.gather(
			self._resolve_ids(self._company_ids, company_names, "company", MAX_COMPANY_IDS),
			self._resolve_ids(self._keyword_ids, keyword_names, "keyword", MAX_KEYWORD_IDS),
		)

		try:
			pages = await asyncio.gather(
				*(self._discover(mt, plan, keyword_ids, company_ids) for mt in media_types)
			)
		except CollaboratorError as e:
			logger.error(f"[Recommender] Discover failed: {e}")
			raise RecommendationError(f"discover failed: {e}") from e

		merged: List[ResultItem] = []
		seen = set()
		for page in pages:
			for item in page:
				if item.key in seen:
					continue
				seen.add(item.key)
				merged.append(item)

		not_tokens = [t for t in uniq_strings(plan.exclude_keywords) if len(normalize(t)) >= 2]
		kept = [item for item in merged if not contains_any(item.text, not_tokens)]

		tokens = uniq_strings(list(plan.include_keywords) + company_names)[:MAX_SCORE_TOKENS]
		for item in kept:
			item.match_score, item.reasons = score_candidate(item, tokens, not_tokens, plan.year_from, plan.year_to)

		kept.sort(key=lambda it: (-it.match_score, -it.vote_average, -it.vote_count))
		top = kept[:MAX_RESULTS]
		await self._enrich(top, plan.region)

		logger.info(
			f"[Recommender] media={media_types} | companies={len(company_ids)} | keywords={len(keyword_ids)} "
			f"| candidates={len(merged)} | kept={len(top)}"
		)
		return top
