"""
Alias index built once from the lexicon.
Provides the substring scan list, the normalized-key reverse map, and the
hashtag rules used to detect lexicon mentions in free text.
"""

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from .lexicon import HASHTAG_RULES, LEXICON, HashtagRule, LexiconEntry, normalize

# Keys shorter than this never take part in substring scanning
MIN_SCAN_KEY_LENGTH = 2


@dataclass(frozen=True)
class AliasIndex:
	table: Mapping[str, LexiconEntry]
	rules: Tuple[HashtagRule, ...]
	scan_keys: Tuple[Tuple[str, str], ...]  # (lowercased key, original key)
	by_normalized: Mapping[str, str]  # normalize(key) -> key
	by_alias: Mapping[str, str]  # normalize(alias) -> first key listing it

	def resolve(self, term: Optional[str]) -> Optional[LexiconEntry]:
		"""Exact key, then normalized key, then alias back-reference. Absence is not an error."""
		if not term:
			return None
		direct = self.table.get(term)
		if direct is not None:
			return direct
		nk = normalize(term)
		if not nk:
			return None
		key = self.by_normalized.get(nk) or self.by_alias.get(nk)
		return self.table.get(key) if key else None

	def detect_hits(self, text: str) -> List[str]:
		"""Lexicon keys mentioned in text: hashtag rules first, then substring hits, in table order."""
		q = (text or "").strip()
		if not q:
			return []
		hits = [r.key for r in self.rules if r.matches(q)]
		lower = q.lower()
		hits.extend(key for key_lower, key in self.scan_keys if key_lower in lower)
		logger.debug(f"[Index] Hits for '{q}': {hits}")
		return hits


def build_index(table: Mapping[str, LexiconEntry], rules: Sequence[HashtagRule] = ()) -> AliasIndex:
	"""Derive the lookup structures of a lexicon table. Pure; call once per table."""
	scan_keys = tuple(
		(key.lower(), key) for key in table if len(key) >= MIN_SCAN_KEY_LENGTH
	)
	by_normalized: Dict[str, str] = {}
	for key in table:
		by_normalized.setdefault(normalize(key), key)
	by_alias: Dict[str, str] = {}
	for key, entry in table.items():
		for alias in entry.aliases:
			by_alias.setdefault(normalize(alias), key)
	logger.info(
		f"[Index] Built alias index | keys={len(table)} | scan_keys={len(scan_keys)} | aliases={len(by_alias)}"
	)
	return AliasIndex(
		table=table,
		rules=tuple(rules),
		scan_keys=scan_keys,
		by_normalized=MappingProxyType(by_normalized),
		by_alias=MappingProxyType(by_alias),
	)


@lru_cache(maxsize=1)
def default_index() -> AliasIndex:
	"""The process-wide index over the built-in lexicon."""
	return build_index(LEXICON, HASHTAG_RULES)
