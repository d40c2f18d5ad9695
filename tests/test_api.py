"""
HTTP-level tests for the FastAPI app, with the engine built from in-memory fakes.
Run: python tests/test_api.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fastapi.testclient import TestClient

import api
from fakes import FakeClassifier, FakeRecommender, FakeRetriever, hit, item
from picky.search_engine import SearchEngine


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def with_engine(fn, retriever=None, classifier=None, recommender=None):
	"""Run fn(client, recommender) against an engine made of fakes; startup hooks are not triggered."""
	recommender = recommender or FakeRecommender([item(77, "메멘토")])
	engine = SearchEngine(
		retriever=retriever or FakeRetriever(default_hits=[hit(27205, "인셉션")]),
		classifier=classifier or FakeClassifier(),
		recommender=recommender,
	)
	previous = api.ENGINE
	api.ENGINE = engine
	try:
		fn(TestClient(api.app), recommender)
	finally:
		api.ENGINE = previous


def test_health():
	def check(client, _):
		body = client.get("/health").json()
		assert_equal(body["status"], "ok", "status")
		assert_true(body["engine_ready"], "engine ready")

	with_engine(check)


def test_not_ready():
	previous = api.ENGINE
	api.ENGINE = None
	try:
		assert_equal(TestClient(api.app).get("/search", params={"q": "인셉션"}).status_code, 503, "engine missing")
	finally:
		api.ENGINE = previous


def test_search():
	def check(client, _):
		r = client.get("/search", params={"q": "인셉션"})
		assert_equal(r.status_code, 200, "status")
		body = r.json()
		assert_equal([x["id"] for x in body["results"]], [27205, 77], "ranked ids")
		assert_equal(body["results"][0]["matchScore"], 100, "camelCase score")
		assert_equal(body["intentSummary"]["confidence"], 0.9, "intent summary")

		r = client.get("/search", params={"q": ""})
		assert_equal(r.status_code, 200, "empty query is not an error")
		assert_equal(r.json()["results"], [], "no results")

	with_engine(check)


def test_search_failure_maps_to_502():
	def check(client, _):
		assert_equal(client.get("/search", params={"q": "인셉션"}).status_code, 502, "classifier failure")

	with_engine(check, classifier=FakeClassifier(fail=True))

	def check_rec(client, _):
		assert_equal(client.get("/search", params={"q": "인셉션"}).status_code, 502, "recommender failure")

	with_engine(check_rec, recommender=FakeRecommender(fail=True))


def test_search_multi():
	def check(client, _):
		body = client.get("/picky/search/multi", params={"q": "인셉션"}).json()
		assert_true(len(body["expandedQueries"]) >= 1, "variants")
		assert_equal(body["results"][0]["mediaType"], "movie", "normalized hit")

	with_engine(check)


def test_recommend():
	def check(client, recommender):
		r = client.post("/picky/recommend", json={"prompt": "잔잔한 이야기", "mediaTypes": ["tv"], "page": 2})
		assert_equal(r.status_code, 200, "status")
		assert_equal([x["id"] for x in r.json()["items"]], [77], "items")
		plan = recommender.plans[0]
		assert_equal(plan.media_types, ["tv"], "explicit media types win")
		assert_equal(plan.page, 2, "page")

	with_engine(check)


def test_expand_and_quality():
	def check(client, _):
		body = client.get("/picky/expand", params={"q": "디즈니 애니"}).json()
		assert_equal(body["expandedQueries"][0], "디즈니 애니", "original query first")
		assert_true(len(body["expandedQueries"]) <= 6, "variant cap")

		assert_equal(client.get("/picky/quality", params={"q": "a"}).json()["ok"], False, "too short")
		assert_equal(client.get("/picky/quality", params={"q": "지브리 감성 애니"}).json()["ok"], True, "good prompt")

	with_engine(check)


def main():
	test_health()
	test_not_ready()
	test_search()
	test_search_failure_maps_to_502()
	test_search_multi()
	test_recommend()
	test_expand_and_quality()
	print("API tests passed")


if __name__ == "__main__":
	main()
