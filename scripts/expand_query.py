"""
Inspect how the lexicon reads a prompt, without any network call.

This script prints:
1) the expanded query variants sent to multi search
2) the expanded include keywords used for boosting
3) the lexicon signals (company queries, detected original language)
4) the local parse (media types, genres, years, negated keywords)

Usage:
    python -m scripts.expand_query "디즈니 애니 추천"
    python -m scripts.expand_query "공포 빼고 90년대 일본 영화" --max-variants 8
"""

import argparse  # command-line arguments

from loguru import logger  # console logging

from picky.expander import expand_keywords, expand_query  # lexicon expansion
from picky.intent import infer_signals  # lexicon signals
from picky.query_parser import QueryParser, assess_quality, extract_tags, tokenize  # local parse


def main():
	ap = argparse.ArgumentParser(description="Show lexicon expansion and intent signals for a prompt")
	ap.add_argument("prompt", help="free-text prompt")
	ap.add_argument("--max-variants", type=int, default=6, help="cap on expanded queries")
	args = ap.parse_args()

	prompt = args.prompt
	logger.info("=" * 60)
	logger.info(f"Prompt: {prompt}")
	logger.info("=" * 60)

	quality = assess_quality(prompt)
	logger.info(f"[Quality] ok={quality.ok} reason={quality.reason}")
	if not prompt.strip():
		return

	# 1) Variants
	for i, variant in enumerate(expand_query(prompt, args.max_variants), 1):
		logger.info(f"[Variant {i}] {variant}")

	# 2) Keywords
	logger.info(f"[Keywords] {expand_keywords(tokenize(prompt))}")

	# 3) Signals
	signals = infer_signals(prompt)
	logger.info(f"[Signals] include={signals.include_expanded}")
	logger.info(f"[Signals] companies={signals.company_queries}")
	logger.info(f"[Signals] language={signals.detected_original_language}")

	# 4) Local parse
	parsed = QueryParser().parse(prompt)
	logger.info(
		f"[Parse] media={parsed.media_types} | genres={parsed.genre_ids} | years={parsed.year_range} "
		f"| exclude={parsed.exclude_keywords} | title={parsed.title_tokens}"
	)
	logger.info(f"[Tags] {extract_tags(prompt)}")


if __name__ == "__main__":
	main()
