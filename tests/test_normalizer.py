"""
Unit tests for the per-source TMDB normalizers.
Run: python tests/test_normalizer.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from picky.normalizer import from_discover_hit, from_search_hit, from_similar_hit, provider_badges


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_search_hit_movie():
	it = from_search_hit({
		"id": 27205, "media_type": "movie", "title": "인셉션", "overview": "꿈 속의 꿈",
		"poster_path": "/p.jpg", "vote_average": 8.4, "vote_count": 35000,
		"release_date": "2010-07-15", "genre_ids": [28, 878], "original_language": "en",
	})
	assert_equal((it.id, it.media_type, it.title), (27205, "movie", "인셉션"), "identity")
	assert_equal(it.year, 2010, "year from release date")
	assert_equal(it.genre_ids, [28, 878], "genres")
	assert_equal(it.source, "search", "source tag")


def test_search_hit_tv_uses_name():
	it = from_search_hit({"id": 1, "media_type": "tv", "name": "오징어 게임", "first_air_date": "2021-09-17"})
	assert_equal(it.title, "오징어 게임", "tv name")
	assert_equal(it.release_date, "2021-09-17", "first air date")


def test_missing_fields_default():
	it = from_search_hit({"id": 5, "media_type": "movie"})
	assert_equal(it.title, "", "title default")
	assert_equal(it.overview, "", "overview default")
	assert_true(it.poster_path is None, "poster default")
	assert_equal(it.vote_average, 0.0, "vote average default")
	assert_equal(it.vote_count, 0, "vote count default")
	assert_equal(it.genre_ids, [], "genres default")
	assert_true(it.year is None, "no year")

	it = from_search_hit({"id": 6, "media_type": "movie", "vote_average": "8", "genre_ids": "28", "release_date": "abcd"})
	assert_equal(it.vote_average, 0.0, "non-numeric vote average")
	assert_equal(it.genre_ids, [], "non-list genres")
	assert_true(it.year is None, "garbage date")


def test_unidentifiable_hits():
	assert_true(from_search_hit({"id": 9, "media_type": "person", "name": "Nolan"}) is None, "person dropped")
	assert_true(from_search_hit({"id": "9", "media_type": "movie"}) is None, "string id dropped")
	assert_true(from_search_hit({"media_type": "movie"}) is None, "missing id dropped")
	assert_true(from_search_hit(None) is None, "non-dict dropped")
	assert_true(from_discover_hit({"id": 1}, "person") is None, "bad media type dropped")


def test_other_sources():
	it = from_similar_hit({"id": 2, "title": "테넷"}, "movie")
	assert_equal((it.media_type, it.source), ("movie", "similar"), "similar source")
	it = from_discover_hit({"id": 3, "name": "무빙"}, "tv")
	assert_equal((it.title, it.source), ("무빙", "recommend"), "discover source")


def test_provider_badges():
	rows = [{"provider_id": i, "provider_name": f"P{i}", "logo_path": "/l.png"} for i in range(8)]
	rows.insert(0, {"provider_id": 0, "provider_name": "dup"})
	rows.append({"provider_name": "no id"})
	badges = provider_badges(rows)
	assert_equal(len(badges), 6, "badge cap")
	assert_equal(badges[0].provider_name, "dup", "first row wins on duplicate id")
	assert_equal(provider_badges(None), [], "missing block")


def main():
	test_search_hit_movie()
	test_search_hit_tv_uses_name()
	test_missing_fields_default()
	test_unidentifiable_hits()
	test_other_sources()
	test_provider_badges()
	print("Normalizer tests passed")


if __name__ == "__main__":
	main()
