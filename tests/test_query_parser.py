"""
Unit tests for QueryParser: media types, year ranges, genres, negations, tags and quality.
Run: python tests/test_query_parser.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

import pytest

from picky.query_parser import QueryParser, assess_quality, extract_tags, normalize_query, tokenize

PARSER = QueryParser()


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_normalize_and_tokenize():
	assert_equal(normalize_query("  디즈니+  애니!!\u200b "), "디즈니 애니", "punctuation and zero-width removed")
	assert_equal(tokenize("디즈니 애니 추천해줘"), ["디즈니", "애니"], "stopwords removed")
	assert_equal(tokenize("a movie"), ["a"], "single chars survive stopword removal")
	assert_equal(tokenize(""), [], "empty")


def test_korean_years():
	assert_equal(PARSER.parse("90년대 홍콩 영화").year_range, (1990, 1999), "90년대")
	assert_equal(PARSER.parse("2010년대 로맨스").year_range, (2010, 2019), "2010년대")
	assert_equal(PARSER.parse("20년대 드라마").year_range, (2020, 2029), "20년대 -> 2000s base")
	assert_equal(PARSER.parse("1994년 개봉작").year_range, (1994, 1994), "1994년")
	assert_equal(PARSER.parse("2005~1999 사이 영화").year_range, (1999, 2005), "reversed range is ordered")


def test_english_years():
	assert_equal(PARSER.parse("sci-fi movies from the 90s").year_range, (1990, 1999), "90s decade parsing")
	assert_equal(PARSER.parse("funny films from the early 2000s").year_range, (2000, 2004), "early 2000s parsing")
	assert_equal(PARSER.parse("thrillers before 2000").year_range, (1900, 1999), "before boundary")
	assert_equal(PARSER.parse("horror 1990-1995").year_range, (1990, 1995), "explicit range")
	assert_true(PARSER.parse("잔잔한 영화").year_range is None, "no year info")


def test_media_types():
	assert_equal(PARSER.parse("무서운 영화").media_types, ["movie"], "movie only")
	assert_equal(PARSER.parse("일본 드라마 추천").media_types, ["tv"], "tv only")
	assert_equal(PARSER.parse("지브리 애니").media_types, ["movie", "tv"], "anime alone -> both")
	assert_equal(PARSER.parse("영화랑 드라마 둘다").media_types, ["movie", "tv"], "both mentioned")


def test_genres():
	assert_true(27 in PARSER.parse("공포 영화").genre_ids, "공포 -> horror")
	assert_true(16 in PARSER.parse("디즈니 애니").genre_ids, "애니 -> animation")
	assert_true(53 in PARSER.parse("thriler movie").genre_ids, "fuzzy english genre")
	assert_true(PARSER.parse("인셉션").genre_ids == [], "title alone has no genre")


def test_negation():
	pq = PARSER.parse("공포 빼고 로맨스 영화")
	assert_true("공포" in pq.exclude_keywords, "negated token excluded")
	assert_true("horror" in pq.exclude_keywords, "aliases of negated token excluded")
	assert_true("로맨스" not in pq.exclude_keywords, "token after a postfix negation stays")
	assert_true(27 not in pq.genre_ids, "negated genre not inferred")
	assert_true(10749 in pq.genre_ids, "romance kept")

	pq = PARSER.parse("no horror comedy")
	assert_true("horror" in pq.exclude_keywords, "prefix negation")
	assert_true("comedy" not in pq.exclude_keywords, "next token unaffected")


def test_apostrophe_negation():
	for q in ("don't horror comedy", "don’t horror comedy"):
		pq = PARSER.parse(q)
		assert_true("horror" in pq.exclude_keywords, f"contracted negation in {q!r}")
		assert_true("comedy" not in pq.exclude_keywords, "next token only")
	assert_equal(normalize_query("don't"), "dont", "apostrophe removed, not split")


def test_title_tokens():
	pq = PARSER.parse("인셉션 같은 영화 추천")
	assert_equal(pq.title_tokens, ["인셉션"], "fillers removed from title tokens")


def test_empty_raises():
	with pytest.raises(ValueError):
		PARSER.parse("   ")


def test_tags():
	tags = extract_tags("디즈니 애니 추천 디즈니 감성")
	assert_equal(tags, ["디즈니", "감성"], "tags skip stop terms and duplicates")
	assert_true(len(extract_tags(" ".join(f"단어{i}" for i in range(30)))) == 12, "tag cap")


def test_quality():
	assert_equal(assess_quality("").ok, False, "empty")
	assert_equal(assess_quality("a").ok, False, "too short")
	assert_equal(assess_quality("추천 영화").ok, False, "only generic words")
	q = assess_quality("지브리 감성 애니")
	assert_true(q.ok and q.reason is None, "good query")
	assert_true(assess_quality("x" * 120).ok, "long query still ok")


def main():
	test_normalize_and_tokenize()
	test_korean_years()
	test_english_years()
	test_media_types()
	test_genres()
	test_negation()
	test_apostrophe_negation()
	test_title_tokens()
	test_empty_raises()
	test_tags()
	test_quality()
	print("QueryParser tests passed")


if __name__ == "__main__":
	main()
