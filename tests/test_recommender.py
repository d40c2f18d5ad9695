"""
Unit tests for the discover-based recommendation engine.
Run: python tests/test_recommender.py
"""

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

import pytest

from fakes import FakeTmdb, hit, item
from picky.errors import RecommendationError
from picky.models import SearchPlan
from picky.recommender import DiscoverRecommender, discover_params, pick_keyword_queries, score_candidate


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def make_plan(**kwargs):
	base = dict(prompt="지브리 감성", media_types=["movie", "tv"])
	base.update(kwargs)
	return SearchPlan(**base)


def test_discover_params():
	plan = make_plan(genre_ids=[16, 14], year_from=1990, year_to=1999, original_language="ja")
	movie = discover_params("movie", plan, keyword_ids=[1, 2], company_ids=[10])
	assert_equal(movie["with_genres"], "16,14", "genres joined with commas")
	assert_equal(movie["primary_release_date.gte"], "1990-01-01", "movie start date")
	assert_equal(movie["primary_release_date.lte"], "1999-12-31", "movie end date")
	assert_equal(movie["with_keywords"], "1|2", "keywords joined with pipes")
	assert_equal(movie["with_companies"], "10", "companies for movies")
	assert_equal(movie["with_original_language"], "ja", "language")

	tv = discover_params("tv", plan, keyword_ids=[1], company_ids=[10])
	assert_equal(tv["first_air_date.gte"], "1990-01-01", "tv start date")
	assert_true("with_companies" not in tv, "no company filter for tv")
	assert_true("with_genres" not in discover_params("movie", make_plan()), "no empty filters")


def test_pick_keyword_queries():
	keywords = [f"en{i}" for i in range(10)] + [f"한글{i}" for i in range(6)]
	picked = pick_keyword_queries(keywords)
	assert_equal(len(picked), 12, "8 ascii + 4 others")
	assert_equal(picked[0], "en0", "ascii first")
	assert_equal(picked[8], "한글0", "then others")


def test_score_candidate():
	it = item(1, "Spirited Away", overview="a girl in a spirit world", vote_average=8.5)
	it.vote_count = 15000
	it.release_date = "2001-07-20"
	score, reasons = score_candidate(it, ["spirit", "girl"], [], 1995, 2005)
	# 18 + 24 + 10 + 5.1 + min(log10(15001)*2.2, 7)=7 -> 64.1
	assert_equal(score, 64, "score composition")
	assert_true("키워드 일치 +24" in reasons and "연도 일치 +10" in reasons, "reasons")

	it = item(2, "Nothing", vote_average=0.0)
	it.vote_count = 0
	score, reasons = score_candidate(it, ["spirit"], [], None, None)
	assert_equal(score, 10, "no keyword hit penalty")
	assert_true("키워드 미일치 -8" in reasons, "penalty reason")

	score, _ = score_candidate(item(3, "gore gore", overview="slasher splatter", vote_average=0.0), [], ["gore", "slasher", "splatter", "blood"], None, None)
	assert_equal(score, 0, "score floored at 0")


def test_score_ignores_source():
	a = item(1, "Spirited Away", overview="spirit")
	b = item(1, "Spirited Away", overview="spirit")
	b.source = "search"
	assert_equal(score_candidate(a, ["spirit"], []), score_candidate(b, ["spirit"], []), "same score for every source")


def test_recommend_flow():
	tmdb = FakeTmdb(
		discover_hits={
			"movie": [
				hit(1, "Spirited Away", overview="spirit world", vote_average=8.5),
				hit(2, "Gore Fest", overview="gore everywhere", vote_average=9.0),
				hit(1, "Spirited Away", overview="spirit world"),
			],
			"tv": [hit(3, "Spirit Show", media_type="tv", overview="spirit", vote_average=7.0)],
		},
		companies={"Studio Ghibli": 10342},
		keywords={"spirit": 77},
		providers=[{"provider_id": 8, "provider_name": "Netflix"}],
		ratings={"movie": "12"},
	)
	rec = DiscoverRecommender(tmdb)
	plan = make_plan(include_keywords=["spirit"], exclude_keywords=["gore"], company_queries=["Studio Ghibli"])
	items = asyncio.run(rec.recommend(plan))

	assert_equal([i.key for i in items], [("movie", 1), ("tv", 3)], "deduplicated, excluded, ordered")
	assert_true(all(0 <= i.match_score <= 100 for i in items), "score bounds")
	assert_equal(items[0].providers[0].provider_name, "Netflix", "providers enriched")
	assert_equal(items[0].age_rating, "12", "age rating enriched")
	assert_true(items[1].age_rating is None, "missing rating is None")

	movie_params = dict(tmdb.discover_calls)["movie"]
	assert_equal(movie_params["with_companies"], "10342", "company id resolved")
	assert_equal(movie_params["with_keywords"], "77", "keyword id resolved")

	asyncio.run(rec.recommend(plan))
	assert_equal(tmdb.company_calls, ["Studio Ghibli"], "company id cached")


def test_enrichment_failure_degrades():
	tmdb = FakeTmdb(discover_hits={"movie": [hit(1, "A")]}, fail_providers=True)
	items = asyncio.run(DiscoverRecommender(tmdb).recommend(make_plan(media_types=["movie"])))
	assert_equal(len(items), 1, "item kept")
	assert_equal(items[0].providers, [], "providers empty on failure")


def test_discover_failure_is_fatal():
	tmdb = FakeTmdb(fail_discover=True)
	with pytest.raises(RecommendationError):
		asyncio.run(DiscoverRecommender(tmdb).recommend(make_plan()))


def main():
	test_discover_params()
	test_pick_keyword_queries()
	test_score_candidate()
	test_score_ignores_source()
	test_recommend_flow()
	test_enrichment_failure_degrades()
	test_discover_failure_is_fatal()
	print("Recommender tests passed")


if __name__ == "__main__":
	main()
