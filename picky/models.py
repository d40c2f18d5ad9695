"""
Data models for Picky search.
Defines the core data structures passed between the lexicon, intent inference,
retrieval and ranking steps. Everything here lives for one request at most.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional, Tuple  # lists, optional values, and fixed-size tuples

from .lexicon import normalize  # same form the keyword lists are compared in

MEDIA_TYPES: Tuple[str, ...] = ("movie", "tv")  # the only media types ever ranked

MAX_INTENT_KEYWORDS = 12  # cap for include/exclude keyword lists coming from the classifier


@dataclass
class ProviderBadge:
	"""A streaming provider where the title is available (flatrate) in the requested region."""
	provider_id: int  # TMDB provider id
	provider_name: str  # display name, e.g. "Netflix"
	logo_path: Optional[str] = None  # TMDB logo path, if any


@dataclass
class ResultItem:
	"""
	One candidate title, normalized from whichever source returned it.
	Identity for de-duplication is the pair (media_type, id).
	"""
	id: int  # TMDB id
	media_type: str  # "movie" or "tv"
	title: str = ""  # title (movie) or name (tv)
	overview: str = ""  # synopsis
	poster_path: Optional[str] = None  # poster image path
	backdrop_path: Optional[str] = None  # backdrop image path
	vote_average: float = 0.0  # 0..10
	vote_count: int = 0  # number of votes
	release_date: Optional[str] = None  # release_date (movie) or first_air_date (tv), "YYYY-MM-DD"
	genre_ids: List[int] = field(default_factory=list)  # TMDB genre ids
	original_language: Optional[str] = None  # ISO 639-1 code
	providers: List[ProviderBadge] = field(default_factory=list)  # availability badges
	age_rating: Optional[str] = None  # certification in the requested region
	match_score: float = 0.0  # 0..100 relevance
	reasons: List[str] = field(default_factory=list)  # human-readable score explanations
	source: str = "search"  # "search", "similar" or "recommend"

	@property
	def key(self) -> Tuple[str, int]:
		return (self.media_type, self.id)

	@property
	def year(self) -> Optional[int]:
		if not self.release_date or len(self.release_date) < 4:
			return None
		try:
			return int(self.release_date[:4])
		except ValueError:
			return None

	@property
	def text(self) -> str:
		"""Normalized title + overview (lowercased, whitespace collapsed), used for keyword matching."""
		return normalize(f"{self.title} {self.overview}")


@dataclass
class ParsedQuery:
	"""
	Represents the meaning we extract locally from the user's free-text prompt.
	No external call is involved; see SearchIntent for the AI-side estimate.
	"""
	raw_query: str  # the original text the user typed
	tokens: List[str]  # normalized tokens without stopwords/junk
	media_types: List[str]  # inferred media types, never empty
	genre_ids: List[int]  # TMDB genre ids inferred from genre words
	year_range: Optional[Tuple[int, int]]  # e.g., (1990, 1999) for "90년대"
	title_tokens: List[str]  # tokens that may be part of a title (fillers removed)
	exclude_keywords: List[str]  # tokens next to a negation word ("공포 빼고") and their aliases


@dataclass
class QueryQuality:
	ok: bool
	reason: Optional[str] = None


def _str_list(value: Any, cap: int = MAX_INTENT_KEYWORDS) -> List[str]:
	if not isinstance(value, list):
		return []
	out: List[str] = []
	seen = set()
	for item in value:
		if not isinstance(item, str):
			continue
		text = item.strip()
		if not text or text.lower() in seen:
			continue
		seen.add(text.lower())
		out.append(text)
	return out[:cap]


def _int_list(value: Any) -> List[int]:
	if not isinstance(value, list):
		return []
	out: List[int] = []
	for item in value:
		if isinstance(item, bool) or not isinstance(item, (int, float)):
			continue
		n = int(item)
		if n not in out:
			out.append(n)
	return out


def _opt_int(value: Any) -> Optional[int]:
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return None
	return int(value)


def _opt_str(value: Any) -> Optional[str]:
	if isinstance(value, str) and value.strip():
		return value.strip()
	return None


@dataclass
class SearchIntent:
	"""Structured interpretation of a prompt as estimated by the AI classifier."""
	media_types: List[str] = field(default_factory=list)
	genre_ids: List[int] = field(default_factory=list)
	year_from: Optional[int] = None
	year_to: Optional[int] = None
	original_language: Optional[str] = None
	include_keywords: List[str] = field(default_factory=list)
	exclude_keywords: List[str] = field(default_factory=list)
	tone: Optional[str] = None
	pace: Optional[str] = None
	ending: Optional[str] = None
	confidence: float = 0.0  # 0..1
	needs_clarification: bool = False
	clarifying_question: Optional[str] = None

	@classmethod
	def from_payload(cls, data: Any) -> "SearchIntent":
		"""
		Build an intent from a loosely-typed JSON object.
		Every field falls back to a safe default; malformed payloads never raise.
		"""
		if not isinstance(data, dict):
			return cls()
		media_types = [m for m in _str_list(data.get("mediaTypes")) if m in MEDIA_TYPES]
		year_from = _opt_int(data.get("yearFrom"))
		year_to = _opt_int(data.get("yearTo"))
		if year_from is not None and year_to is not None and year_from > year_to:
			year_from, year_to = year_to, year_from  # keep yearFrom <= yearTo
		confidence = data.get("confidence")
		if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
			confidence = 0.0
		return cls(
			media_types=media_types,
			genre_ids=_int_list(data.get("genreIds")),
			year_from=year_from,
			year_to=year_to,
			original_language=_opt_str(data.get("originalLanguage")),
			include_keywords=_str_list(data.get("includeKeywords")),
			exclude_keywords=_str_list(data.get("excludeKeywords")),
			tone=_opt_str(data.get("tone")),
			pace=_opt_str(data.get("pace")),
			ending=_opt_str(data.get("ending")),
			confidence=max(0.0, min(1.0, float(confidence))),
			needs_clarification=bool(data.get("needsClarification", False)),
			clarifying_question=_opt_str(data.get("clarifyingQuestion")),
		)


@dataclass
class IntentSignals:
	"""Lexicon-derived signals for a prompt."""
	include_expanded: List[str]  # expanded include keywords
	company_queries: List[str]  # company names for company-scoped retrieval
	detected_original_language: Optional[str]  # "ja", "ko", "en" or None


@dataclass
class SearchPlan:
	"""Fully resolved input of the recommendation engine."""
	prompt: str
	media_types: List[str]
	genre_ids: List[int] = field(default_factory=list)
	year_from: Optional[int] = None
	year_to: Optional[int] = None
	original_language: Optional[str] = None
	include_keywords: List[str] = field(default_factory=list)
	exclude_keywords: List[str] = field(default_factory=list)
	company_queries: List[str] = field(default_factory=list)
	region: str = "KR"
	language: str = "ko-KR"
	page: int = 1
	include_adult: bool = False


@dataclass
class IntentSummary:
	"""What the engine understood from a prompt, returned alongside the results."""
	plan: SearchPlan
	confidence: float
	needs_clarification: bool
	clarifying_question: Optional[str]
	used_ai_media_types: bool

	def to_dict(self) -> Dict[str, Any]:
		return {
			"mediaTypes": list(self.plan.media_types),
			"genreIds": list(self.plan.genre_ids),
			"yearFrom": self.plan.year_from,
			"yearTo": self.plan.year_to,
			"originalLanguage": self.plan.original_language,
			"includeKeywords": list(self.plan.include_keywords),
			"excludeKeywords": list(self.plan.exclude_keywords),
			"companyQueries": list(self.plan.company_queries),
			"confidence": self.confidence,
			"needsClarification": self.needs_clarification,
			"clarifyingQuestion": self.clarifying_question,
			"usedAiMediaTypes": self.used_ai_media_types,
		}


@dataclass
class SearchResponse:
	"""Outcome of one search. An empty results list is a valid outcome, not a failure."""
	intent_summary: Optional[IntentSummary]
	tags: List[str]
	results: List[ResultItem]
	expanded_queries: List[str] = field(default_factory=list)


@dataclass
class MultiSearchResponse:
	"""Lexicon-expanded multi search on its own: the variants issued and the merged hits."""
	expanded_queries: List[str]
	results: List[ResultItem]
