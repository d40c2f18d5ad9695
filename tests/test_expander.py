"""
Unit tests for lexicon query/keyword expansion.
Run: python tests/test_expander.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from picky.alias_index import build_index
from picky.expander import company_hints_for, expand_keywords, expand_query
from picky.lexicon import entry, normalize


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_brand_expansion_scenario():
	out = expand_query("디즈니 애니 추천")
	assert_equal(out[0], "디즈니 애니 추천", "original query first")
	assert_true(
		any("Walt Disney Animation Studios" in v or "Disney Animation" in v for v in out),
		f"Disney animation variant present: {out}",
	)
	assert_true(len(out) <= 6, "default cap")


def test_cap_and_first_element():
	for q in ["  넷플 스릴러 ", "지브리", "마블 히어로", "아무 단어", "x"]:
		for n in [1, 2, 3, 6, 10]:
			out = expand_query(q, n)
			assert_true(len(out) <= n, f"cap {n} for {q!r}")
			assert_equal(out[0], q.strip(), f"first variant for {q!r}")


def test_blank_and_zero():
	assert_equal(expand_query("   "), [], "blank query")
	assert_equal(expand_query("디즈니", 0), [], "zero variants")


def test_no_duplicates_case_insensitive():
	out = expand_query("Disney", 10)
	normalized = [normalize(v) for v in out]
	assert_equal(len(normalized), len(set(normalized)), "variants are unique")


def test_composed_before_bare():
	table = {"foo": entry(["Foo Studio", "Foo Pictures"])}
	index = build_index(table)
	out = expand_query("foo 추천", 10, index=index)
	assert_equal(
		out,
		["foo 추천", "foo 추천 Foo Studio", "foo 추천 Foo Pictures", "Foo Studio", "Foo Pictures"],
		"composed pass then bare pass",
	)
	assert_equal(expand_query("foo 추천", 2, index=index), ["foo 추천", "foo 추천 Foo Studio"], "cap cuts the bare pass")


def test_unknown_query_is_alone():
	assert_equal(expand_query("zzxxqq"), ["zzxxqq"], "no lexicon hit")


def test_expand_keywords():
	out = expand_keywords(["지브리", "추천"])
	assert_true("Studio Ghibli" in out, "aliases added")
	assert_true("추천" not in out, "generic terms removed")
	assert_true(len(expand_keywords(["디즈니", "픽사", "마블", "지브리"], max_out=5)) <= 5, "cap respected")
	assert_equal(expand_keywords([]), [], "empty input")


def test_company_hints():
	hints = company_hints_for(["디즈니", "없는키"])
	assert_true("Walt Disney Pictures" in hints, "company hints of known keys")
	assert_equal(len(hints), len(set(hints)), "hints de-duplicated")


def main():
	test_brand_expansion_scenario()
	test_cap_and_first_element()
	test_blank_and_zero()
	test_no_duplicates_case_insensitive()
	test_composed_before_bare()
	test_unknown_query_is_alone()
	test_expand_keywords()
	test_company_hints()
	print("Expander tests passed")


if __name__ == "__main__":
	main()
