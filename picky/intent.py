"""
Intent inference.
infer_signals() derives lexicon signals (expanded include keywords, company
queries, original language) from a prompt; build_plan() merges them with the
local parse and the AI classification into the plan sent to the recommender.
"""

import re
from typing import List, Optional, Sequence

from loguru import logger

from . import settings
from .alias_index import AliasIndex, default_index
from .expander import company_hints_for, expand_keywords
from .lexicon import uniq_strings
from .models import IntentSignals, ParsedQuery, SearchIntent, SearchPlan

MAX_HIT_EXPANSION = 18  # keywords expanded from the prompt's own lexicon hits
MAX_COMPANY_QUERIES = 12
MAX_INCLUDE_KEYWORDS = 24
MAX_EXCLUDE_KEYWORDS = 18

RE_LANG_JA = re.compile(r"(일본|japan|anime|애니|일드|j-drama)", re.I)
RE_LANG_KO = re.compile(r"(한국|korea|k-drama|국내|한국 드라마|한국영화)", re.I)
RE_LANG_EN = re.compile(r"(english|미드|usa|america)", re.I)


def detect_original_language(prompt: str) -> Optional[str]:
	"""ja, then ko (overrides ja), then en (only when nothing was detected)."""
	language: Optional[str] = None
	if RE_LANG_JA.search(prompt):
		language = "ja"
	if RE_LANG_KO.search(prompt):
		language = "ko"
	if language is None and RE_LANG_EN.search(prompt):
		language = "en"
	return language


def infer_signals(
	prompt: str,
	prior_include_keywords: Sequence[str] = (),
	max_include: int = MAX_INCLUDE_KEYWORDS,
	index: Optional[AliasIndex] = None,
) -> IntentSignals:
	index = index or default_index()
	p = (prompt or "").strip()
	base = uniq_strings(prior_include_keywords)

	hit_keys = index.detect_hits(p)
	expanded_from_prompt = expand_keywords(hit_keys, MAX_HIT_EXPANSION, index=index)
	include_expanded = expand_keywords(base + expanded_from_prompt, max_include, index=index)

	company_queries = company_hints_for(hit_keys + base, index=index)[:MAX_COMPANY_QUERIES]

	signals = IntentSignals(
		include_expanded=include_expanded,
		company_queries=company_queries,
		detected_original_language=detect_original_language(p),
	)
	logger.debug(
		f"[Intent] Signals | hits={uniq_strings(hit_keys)} | include={len(include_expanded)} "
		f"| companies={company_queries} | lang={signals.detected_original_language}"
	)
	return signals


def expand_excludes(terms: Sequence[str], index: Optional[AliasIndex] = None) -> List[str]:
	"""Exclude terms followed by the lexicon aliases of each resolvable one ("공포" also drops "호러", "horror")."""
	index = index or default_index()
	out: List[str] = []
	for term in uniq_strings(terms):
		out.append(term)
		entry = index.resolve(term)
		if entry is not None:
			out.extend(entry.aliases)
	return uniq_strings(out)


def _uses_ai(intent: SearchIntent, values: List) -> bool:
	return intent.confidence >= settings.INTENT_CONFIDENCE_MIN and bool(values)


def build_plan(
	prompt: str,
	intent: SearchIntent,
	parsed: Optional[ParsedQuery],
	signals: IntentSignals,
	region: str = settings.TMDB_REGION,
	language: str = settings.TMDB_LANGUAGE,
	index: Optional[AliasIndex] = None,
) -> SearchPlan:
	"""
	Merge the AI classification with the local heuristics.
	The AI's media types and genres are trusted only above the confidence threshold;
	year bounds and language prefer the AI value and fall back to local inference.
	"""
	local_media = parsed.media_types if parsed else ["movie", "tv"]
	local_genres = parsed.genre_ids if parsed else []
	local_years = parsed.year_range if parsed else None
	local_excludes = parsed.exclude_keywords if parsed else []

	media_types = list(intent.media_types) if _uses_ai(intent, intent.media_types) else list(local_media)
	genre_ids = list(intent.genre_ids) if _uses_ai(intent, intent.genre_ids) else list(local_genres)

	year_from = intent.year_from if intent.year_from is not None else (local_years[0] if local_years else None)
	year_to = intent.year_to if intent.year_to is not None else (local_years[1] if local_years else None)
	if year_from is not None and year_to is not None and year_from > year_to:
		year_from, year_to = year_to, year_from

	include_keywords = expand_keywords(
		list(intent.include_keywords) + list(signals.include_expanded),
		MAX_INCLUDE_KEYWORDS,
		index=index,
	)
	exclude_keywords = uniq_strings(
		expand_excludes(intent.exclude_keywords, index=index) + list(local_excludes)
	)[:MAX_EXCLUDE_KEYWORDS]

	plan = SearchPlan(
		prompt=prompt,
		media_types=media_types,
		genre_ids=genre_ids,
		year_from=year_from,
		year_to=year_to,
		original_language=intent.original_language or signals.detected_original_language,
		include_keywords=include_keywords,
		exclude_keywords=exclude_keywords,
		company_queries=list(signals.company_queries),
		region=region,
		language=language,
	)
	logger.info(
		f"[Intent] Plan | media={plan.media_types} | genres={plan.genre_ids} | years=({plan.year_from}, {plan.year_to}) "
		f"| lang={plan.original_language} | include={len(plan.include_keywords)} | exclude={plan.exclude_keywords}"
	)
	return plan
