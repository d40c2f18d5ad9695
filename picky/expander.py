"""
Query expansion module.
Turns one free-text query into several retrieval-friendly variants, and a short
include-keyword list into a boost-ready keyword set, using the brand lexicon.
"""

from typing import Iterable, List, Optional

from loguru import logger

from .alias_index import AliasIndex, default_index
from .lexicon import KEYWORD_STOPLIST, normalize, uniq_strings

MAX_HIT_KEYS = 6  # lexicon keys used to build variants for one query


def expand_query(query: str, max_variants: int = 6, index: Optional[AliasIndex] = None) -> List[str]:
	"""
	Expand a query against the lexicon.
	The trimmed query always comes first; then, for each of up to 6 lexicon hits,
	"{query} {alias}" for every alias, then every bare alias, until max_variants is reached.
	"""
	q = (query or "").strip()
	if not q or max_variants <= 0:
		return []
	index = index or default_index()

	out: List[str] = [q]
	emitted = {normalize(q)}

	def emit(candidate: str) -> None:
		key = normalize(candidate)
		if key and key not in emitted:
			emitted.add(key)
			out.append(candidate)

	keys = uniq_strings(index.detect_hits(q))[:MAX_HIT_KEYS]
	for key in keys:
		entry = index.resolve(key)
		if entry is None:
			continue
		# composed variants are preferred over bare aliases when the cap is reached
		for alias in entry.aliases:
			if len(out) >= max_variants:
				break
			emit(f"{q} {alias}".strip())
		for alias in entry.aliases:
			if len(out) >= max_variants:
				break
			emit(alias)
		if len(out) >= max_variants:
			break

	logger.debug(f"[Expander] '{q}' -> {len(out)} variants (hit keys={keys})")
	return out[:max_variants]


def expand_keywords(keywords: Iterable[str], max_out: int = 24, index: Optional[AliasIndex] = None) -> List[str]:
	"""Add the aliases of every resolvable keyword, drop generic stop terms, cap at max_out."""
	index = index or default_index()
	base = uniq_strings(keywords)
	extra: List[str] = []
	for keyword in base:
		entry = index.resolve(keyword)
		if entry is not None:
			extra.extend(entry.aliases)

	merged = [k for k in uniq_strings(base + extra) if normalize(k) not in KEYWORD_STOPLIST]
	return merged[:max(0, max_out)]


def company_hints_for(keys: Iterable[str], index: Optional[AliasIndex] = None) -> List[str]:
	"""Company hints of every resolvable key, de-duplicated in key order."""
	index = index or default_index()
	hints: List[str] = []
	for key in uniq_strings(keys):
		entry = index.resolve(key)
		if entry is not None:
			hints.extend(entry.company_hints)
	return uniq_strings(hints)
