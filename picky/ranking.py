"""
Ranking module.
Scores direct search hits by title similarity and applies the final exclude filter,
include-keyword boost and ordering on the merged candidate list.
"""

from typing import List, Sequence

from loguru import logger

from .lexicon import normalize
from .models import ResultItem


def _clamp(value: float, low: float, high: float) -> float:
	return max(low, min(high, value))


def title_similarity(query: str, title: str) -> int:
	"""
	Title similarity in [0, 100]:
	exact normalized match 100, title contains query 96, query contains title 92,
	otherwise 70 + 8 per query token (2+ chars) found in the title, capped at 90.
	"""
	q = normalize(query)
	t = normalize(title)
	if not t or not q:
		return 0
	if q == t:
		return 100
	if q in t:
		return 96
	if t in q:
		return 92
	hits = sum(1 for token in q.split(" ") if len(token) >= 2 and token in t)
	return int(_clamp(70 + 8 * hits, 70, 90))


class Ranker:
	"""
	Final ranking signals applied on top of each candidate's base score:
	- exclude keywords: drop items whose title/overview mention them
	- include keywords: +4 per hit, at most +18
	- ordering: match score, then vote average
	"""

	def __init__(self, boost_per_hit: int = 4, max_boost: int = 18):
		self.boost_per_hit = boost_per_hit
		self.max_boost = max_boost

	def _keywords(self, keywords: Sequence[str]) -> List[str]:
		out: List[str] = []
		for keyword in keywords:
			k = normalize(keyword)
			if k and k not in out:  # one-character keywords ("봄") count too
				out.append(k)
		return out

	def apply_exclude(self, items: List[ResultItem], keywords: Sequence[str]) -> List[ResultItem]:
		"""Keep only items whose title + overview contain none of the keywords (case-insensitive)."""
		excluded = [normalize(k) for k in keywords if normalize(k)]
		if not excluded:
			return list(items)
		kept = [item for item in items if not any(k in item.text for k in excluded)]
		if len(kept) != len(items):
			logger.debug(f"[Ranker] Excluded {len(items) - len(kept)} items for {excluded}")
		return kept

	def apply_boost(self, items: List[ResultItem], keywords: Sequence[str]) -> List[ResultItem]:
		"""Add the include-keyword boost to each item's score, in place."""
		include = self._keywords(keywords)
		for item in items:
			hits = sum(1 for k in include if k in item.text)
			boost = int(_clamp(hits * self.boost_per_hit, 0, self.max_boost))
			item.match_score = _clamp(item.match_score + boost, 0, 100)
			if boost > 0:
				item.reasons.append(f"키워드 매칭 +{boost}")
		return items

	def order(self, items: List[ResultItem], limit: int) -> List[ResultItem]:
		"""Score desc, then vote average desc; stable for full ties."""
		ranked = sorted(items, key=lambda it: (-it.match_score, -it.vote_average))
		return ranked[:max(0, limit)]
