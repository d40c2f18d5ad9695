"""
Query parsing module.
Extracts media types, TMDB genre ids, year ranges, negated keywords and display tags
from a free-text Korean/English prompt. Purely local: no network call is made here.
"""

import re  # regex for year/genre/media extraction
from typing import List, Optional, Set, Tuple  # type annotations

from rapidfuzz import fuzz, process  # fuzzy matching utilities

from loguru import logger  # console logging

from .alias_index import AliasIndex, default_index  # lexicon lookups for negated terms
from .lexicon import (
	JUNK_TOKENS,
	NEGATION_PATTERNS,
	STOPWORDS_EN,
	STOPWORDS_KO,
	TAG_STOPWORDS,
	uniq_strings,
)
from .models import MEDIA_TYPES, ParsedQuery, QueryQuality  # structured query representation

MAX_TAGS = 12  # display tags returned next to a result list

RE_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")  # invisible characters pasted from chats
RE_APOSTROPHE = re.compile("['\u2019]")  # "don't" -> "dont"
RE_NON_WORD = re.compile(r"[^\w\s]+|_+")  # everything but unicode letters/digits/spaces

# Negation words placed before the negated token ("no horror", "안 무서운")
PREFIX_NEGATIONS = frozenset(["no", "not", "dont", "without", "avoid", "exclude", "except", "excluding", "안"])
NEGATIONS = frozenset(RE_APOSTROPHE.sub("", n.lower()) for n in NEGATION_PATTERNS)


def normalize_query(q: Optional[str]) -> str:
	"""Lowercase, strip zero-width characters and apostrophes, turn punctuation into spaces, collapse whitespace."""
	text = RE_ZERO_WIDTH.sub("", (q or "").strip().lower())
	text = RE_APOSTROPHE.sub("", text)
	text = RE_NON_WORD.sub(" ", text)
	return " ".join(text.split())


def tokenize(q: Optional[str]) -> List[str]:
	"""Split a normalized query; junk is dropped, stopwords only for tokens longer than one character."""
	normalized = normalize_query(q)
	if not normalized:
		return []
	tokens = [t for t in normalized.split(" ") if t and t not in JUNK_TOKENS]
	return [t for t in tokens if len(t) <= 1 or (t not in STOPWORDS_KO and t not in STOPWORDS_EN)]


def extract_tags(q: Optional[str]) -> List[str]:
	"""Short display tags: tokens of two characters or more that carry meaning."""
	words = [w for w in normalize_query(q).split(" ") if len(w) >= 2 and w not in TAG_STOPWORDS]
	return uniq_strings(words)[:MAX_TAGS]


def assess_quality(q: Optional[str]) -> QueryQuality:
	"""Rule-based check of whether a prompt is specific enough to search with."""
	n = normalize_query(q)
	if not n:
		return QueryQuality(ok=False, reason="검색어가 비어 있어요.")
	if len(n) < 2:
		return QueryQuality(ok=False, reason="검색어가 너무 짧아요.")
	if len(n) > 100:
		return QueryQuality(ok=True, reason="검색어가 길어서 핵심 키워드 위주로 처리될 수 있어요.")

	# symbols that survived normalization (other scripts, e.g. kana) may be ignored downstream
	if re.sub(r"[a-z0-9가-힣\s]", "", n):
		return QueryQuality(ok=True, reason="특수문자가 많아서 일부가 무시될 수 있어요.")

	meaningful = [t for t in tokenize(n) if len(t) >= 2]
	if not meaningful:
		return QueryQuality(ok=False, reason="의미 있는 키워드가 부족해요.")
	return QueryQuality(ok=True)


class QueryParser:
	"""
	Parses natural language prompts into a structured ParsedQuery.
	Uses regex tables for Korean genre words, media types and year expressions,
	rapidfuzz for English genre names with small typos, and the alias index
	to widen negated terms ("공포 빼고") into their lexicon aliases.
	"""

	# Pre-compiled regex patterns for year expressions
	RE_RANGE = re.compile(r"(19\d{2}|20\d{2})\s*(?:[-~–]|to)\s*(19\d{2}|20\d{2})", re.I)  # 1990-1999, 1990~1999
	RE_KO_CENTURY_DECADE = re.compile(r"(\d{4})\s*년대")  # 1990년대
	RE_KO_DECADE = re.compile(r"(\d{2})\s*년대")  # 90년대
	RE_KO_YEAR = re.compile(r"(\d{4})\s*년")  # 1994년
	RE_BEFORE = re.compile(r"before\s+(19\d{2}|20\d{2})", re.I)  # before 2000
	RE_AFTER = re.compile(r"after\s+(19\d{2}|20\d{2})", re.I)  # after 2010
	RE_CENTURY_DECADE = re.compile(r"(?P<prefix>early|mid|late)?\s*(?P<century>\d{4})\s*'?s\b", re.I)  # early 2000s
	RE_DECADE = re.compile(r"(?P<prefix>early|mid|late)?\s*\b(?P<decade>\d{2})\s*'?s\b", re.I)  # '90s, mid 80s
	RE_YEAR = re.compile(r"\b(19\d{2}|20\d{2})\b")  # single year like 1995

	# Media type hints
	RE_MOVIE = re.compile(r"영화|극장|movie|film", re.I)
	RE_TV = re.compile(r"tv|드라마|시리즈|show|series", re.I)

	# Korean/English genre words -> TMDB genre id
	GENRE_PATTERNS: Tuple[Tuple[re.Pattern, int], ...] = (
		(re.compile(r"애니|animation|anime", re.I), 16),
		(re.compile(r"액션", re.I), 28),
		(re.compile(r"모험|어드벤처", re.I), 12),
		(re.compile(r"코미디|코메디|웃긴", re.I), 35),
		(re.compile(r"범죄|느와르", re.I), 80),
		(re.compile(r"다큐", re.I), 99),
		(re.compile(r"드라마", re.I), 18),
		(re.compile(r"가족", re.I), 10751),
		(re.compile(r"판타지", re.I), 14),
		(re.compile(r"공포|호러|무서운", re.I), 27),
		(re.compile(r"음악|뮤지컬", re.I), 10402),
		(re.compile(r"미스터리|추리", re.I), 9648),
		(re.compile(r"로맨스|멜로|연애", re.I), 10749),
		(re.compile(r"sf|에스에프|공상과학", re.I), 878),
		(re.compile(r"스릴러", re.I), 53),
		(re.compile(r"전쟁", re.I), 10752),
		(re.compile(r"서부", re.I), 37),
		(re.compile(r"역사|사극", re.I), 36),
	)

	# English genre names for fuzzy token matching
	GENRE_NAMES = {
		"action": 28, "adventure": 12, "animation": 16, "comedy": 35, "crime": 80,
		"documentary": 99, "drama": 18, "family": 10751, "fantasy": 14, "history": 36,
		"horror": 27, "music": 10402, "mystery": 9648, "romance": 10749,
		"thriller": 53, "war": 10752, "western": 37,
	}
	FUZZY_GENRE_MIN_SCORE = 88  # rapidfuzz ratio needed to accept a typo'd genre name

	def __init__(self, index: Optional[AliasIndex] = None):
		self._index = index or default_index()
		self._genre_list = sorted(self.GENRE_NAMES)
		# Words that never make sense as part of a title
		self._fillers: Set[str] = set(STOPWORDS_KO) | set(STOPWORDS_EN) | set(TAG_STOPWORDS) | NEGATIONS
		logger.debug(f"[Parser] Initialized with {len(self._genre_list)} fuzzy genre names")

	def parse(self, query: str) -> ParsedQuery:
		"""Main entry: produce a ParsedQuery from a raw string."""
		if not query or not query.strip():  # empty input guard
			raise ValueError("Query cannot be empty")

		q = normalize_query(query)
		raw = query.strip().lower()  # year/range regexes need the punctuation normalize_query removes
		logger.debug(f"[Parser] Input query: '{query}' -> normalized: '{q}'")

		tokens = tokenize(query)

		# 1) Media types
		media_types = self._extract_media_types(q)

		# 2) Year range
		year_range = self._extract_year_range(raw)

		# 3) Negated keywords ("공포 빼고", "no horror")
		exclude_keywords = self._extract_excludes(tokens)

		# 4) Genres (regex table + fuzzy English names), negated words left out
		excluded = {e.lower() for e in exclude_keywords}
		genre_text = " ".join(w for w in q.split(" ") if w not in excluded)
		genre_ids = self._extract_genres(genre_text, [t for t in tokens if t not in excluded])

		# 5) Title tokens: what is left once fillers are removed
		title_tokens = self._extract_title_tokens(tokens, exclude_keywords)

		parsed = ParsedQuery(
			raw_query=query,
			tokens=tokens,
			media_types=media_types,
			genre_ids=genre_ids,
			year_range=year_range,
			title_tokens=title_tokens,
			exclude_keywords=exclude_keywords,
		)
		logger.debug(
			f"[Parser] Parsed result | media={parsed.media_types} | genres={parsed.genre_ids} "
			f"| year_range={parsed.year_range} | exclude={parsed.exclude_keywords[:5]} | title={parsed.title_tokens}"
		)
		return parsed

	def _extract_media_types(self, q: str) -> List[str]:
		wants_movie = bool(self.RE_MOVIE.search(q))
		wants_tv = bool(self.RE_TV.search(q))
		if wants_movie and not wants_tv:
			return ["movie"]
		if wants_tv and not wants_movie:
			return ["tv"]
		return list(MEDIA_TYPES)  # both or neither (e.g. "애니" alone)

	def _extract_year_range(self, q: str) -> Optional[Tuple[int, int]]:
		# 1990-1999 / 1990~1999 explicit range
		r = self.RE_RANGE.search(q)
		if r:
			start, end = int(r.group(1)), int(r.group(2))
			if start > end:  # normalize order
				start, end = end, start
			logger.debug(f"[Parser] Found explicit range -> ({start}, {end})")
			return (start, end)

		# 1990년대
		m = self.RE_KO_CENTURY_DECADE.search(q)
		if m:
			decade_start = int(m.group(1)) // 10 * 10
			return (decade_start, decade_start + 9)

		# 90년대 (00-29 -> 2000s, 30-99 -> 1900s)
		m = self.RE_KO_DECADE.search(q)
		if m:
			dec = int(m.group(1))
			base = 1900 if dec >= 30 else 2000
			return (base + dec, base + dec + 9)

		# 1994년
		m = self.RE_KO_YEAR.search(q)
		if m:
			y = int(m.group(1))
			return (y, y)

		# before / after boundaries
		m = self.RE_BEFORE.search(q)
		if m:
			end = int(m.group(1))
			return (1900, end - 1)
		m = self.RE_AFTER.search(q)
		if m:
			start = int(m.group(1))
			return (start, 2100)

		# early/mid/late 2000s
		m = self.RE_CENTURY_DECADE.search(q)
		if m:
			return self._prefix_to_range(int(m.group("century")), (m.group("prefix") or "").lower())

		# 90s/80s decade mapping
		m = self.RE_DECADE.search(q)
		if m:
			dec = int(m.group("decade"))
			base = 1900 if dec >= 30 else 2000
			return self._prefix_to_range(base + dec, (m.group("prefix") or "").lower())

		# single year
		m = self.RE_YEAR.search(q)
		if m:
			y = int(m.group(0))
			return (y, y)

		return None  # nothing found

	def _prefix_to_range(self, decade_start: int, prefix: str) -> Tuple[int, int]:
		# Convert optional prefix into a sub-range within the decade
		if prefix == "early":
			return (decade_start, decade_start + 4)
		if prefix == "mid":
			return (decade_start + 5, decade_start + 9)
		if prefix == "late":
			return (decade_start + 7, decade_start + 9)
		return (decade_start, decade_start + 9)

	def _extract_genres(self, q: str, tokens: List[str]) -> List[int]:
		genre_ids: List[int] = []
		for pattern, genre_id in self.GENRE_PATTERNS:
			if pattern.search(q) and genre_id not in genre_ids:
				genre_ids.append(genre_id)
		# Fuzzy token-level match to handle small typos/variants ("thriler", "horor")
		for token in tokens:
			if not re.fullmatch(r"[a-z]{4,}", token):
				continue
			match = process.extractOne(token, self._genre_list, scorer=fuzz.ratio)
			if match and match[1] >= self.FUZZY_GENRE_MIN_SCORE:
				genre_id = self.GENRE_NAMES[match[0]]
				if genre_id not in genre_ids:
					genre_ids.append(genre_id)
					logger.debug(f"[Parser] Genre fuzzy match: '{token}' -> '{match[0]}' (score={match[1]})")
		return genre_ids

	def _extract_excludes(self, tokens: List[str]) -> List[str]:
		excludes: List[str] = []
		for i, token in enumerate(tokens):
			if token in NEGATIONS:
				continue
			prev = tokens[i - 1] if i > 0 else ""
			nxt = tokens[i + 1] if i + 1 < len(tokens) else ""
			# "no horror" negates forward, "공포 빼고" negates backward
			negated = (prev in NEGATIONS and prev in PREFIX_NEGATIONS) or (nxt in NEGATIONS and nxt not in PREFIX_NEGATIONS)
			if not negated:
				continue
			excludes.append(token)
			entry = self._index.resolve(token)
			if entry is not None:
				excludes.extend(entry.aliases)
		return uniq_strings(excludes)

	def _extract_title_tokens(self, tokens: List[str], exclude_keywords: List[str]) -> List[str]:
		excluded = {e.lower() for e in exclude_keywords}
		return [
			t for t in tokens
			if len(t) >= 2 and not t[0].isdigit() and t not in self._fillers and t not in excluded
		]
