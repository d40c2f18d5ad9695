"""
AI intent classification.
LLMIntentClassifier asks an OpenAI-compatible chat endpoint for a JSON intent;
LocalIntentClassifier builds a low-confidence intent from the local parser and is
selected at startup when no LLM key is configured.
"""

import json
import re
from typing import Optional, Protocol

import httpx
from loguru import logger

from . import settings
from .errors import IntentClassificationError
from .models import SearchIntent
from .query_parser import QueryParser

LOCAL_CONFIDENCE = 0.3  # below the AI trust threshold: local media/genre inference wins

RE_CODE_FENCE = re.compile(r"```(?:json)?", re.I)

SYSTEM_PROMPT = """너는 영화/드라마 추천 서비스 'Picky'의 검색 의도 분석기야.
사용자의 요청을 TMDB 검색 조건으로 변환해서 아래 JSON 형식으로만 답해 (마크다운, 설명 금지):
{
  "mediaTypes": ["movie" | "tv"],
  "genreIds": number[],            // TMDB 장르 ID (액션=28, 코미디=35, 로맨스=10749, 애니=16 ...)
  "yearFrom": number | null,
  "yearTo": number | null,
  "originalLanguage": string | null,  // ISO 639-1 (ko, ja, en ...)
  "includeKeywords": string[],     // 영어 키워드 2~6개 (예: "time travel", "revenge")
  "excludeKeywords": string[],
  "tone": string | null,
  "pace": string | null,
  "ending": string | null,
  "confidence": number,            // 0~1
  "needsClarification": boolean,
  "clarifyingQuestion": string | null
}"""


class IntentClassifier(Protocol):
	async def classify(self, prompt: str, language: str, region: str) -> SearchIntent:
		...

	async def close(self) -> None:
		...


def parse_intent_text(text: str) -> SearchIntent:
	"""Strip markdown code fences and parse the model's JSON answer."""
	cleaned = RE_CODE_FENCE.sub("", text or "").strip()
	if not cleaned:
		raise IntentClassificationError("empty classifier answer")
	try:
		data = json.loads(cleaned)
	except json.JSONDecodeError as e:
		raise IntentClassificationError(f"unparseable classifier answer: {e}") from e
	return SearchIntent.from_payload(data)


class LLMIntentClassifier:
	"""Chat-completions client returning a SearchIntent. Every failure is fatal to the search."""

	def __init__(
		self,
		endpoint: str = settings.LLM_ENDPOINT,
		api_key: str = settings.LLM_API_KEY,
		model: str = settings.LLM_MODEL,
		client: Optional[httpx.AsyncClient] = None,
	):
		self.endpoint = endpoint
		self.api_key = api_key
		self.model = model
		self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S)

	def _headers(self) -> dict:
		return {
			"accept": "application/json",
			"content-type": "application/json",
			"authorization": f"Bearer {self.api_key}",
		}

	async def classify(self, prompt: str, language: str, region: str) -> SearchIntent:
		payload = {
			"model": self.model,
			"messages": [
				{"role": "system", "content": SYSTEM_PROMPT},
				{"role": "user", "content": f"language={language} region={region}\n사용자 요청: \"{prompt}\""},
			],
			"temperature": 0,
			"stream": False,
		}
		try:
			response = await self.client.post(self.endpoint, headers=self._headers(), json=payload)
			response.raise_for_status()
			content = response.json()["choices"][0]["message"]["content"]
		except httpx.HTTPError as e:
			logger.error(f"[Classifier] Request failed: {e}")
			raise IntentClassificationError(f"classifier request failed: {e}") from e
		except (ValueError, KeyError, IndexError, TypeError) as e:
			logger.error(f"[Classifier] Malformed response envelope: {e}")
			raise IntentClassificationError(f"malformed classifier response: {e}") from e

		intent = parse_intent_text(content)
		logger.info(
			f"[Classifier] '{prompt}' -> media={intent.media_types} genres={intent.genre_ids} "
			f"confidence={intent.confidence:.2f}"
		)
		return intent

	async def close(self) -> None:
		await self.client.aclose()


class LocalIntentClassifier:
	"""Heuristic classifier used when no LLM is configured."""

	def __init__(self, parser: Optional[QueryParser] = None):
		self.parser = parser or QueryParser()

	async def classify(self, prompt: str, language: str, region: str) -> SearchIntent:
		parsed = self.parser.parse(prompt)
		year_from, year_to = parsed.year_range if parsed.year_range else (None, None)
		return SearchIntent(
			media_types=list(parsed.media_types),
			genre_ids=list(parsed.genre_ids),
			year_from=year_from,
			year_to=year_to,
			exclude_keywords=list(parsed.exclude_keywords),
			confidence=LOCAL_CONFIDENCE,
		)

	async def close(self) -> None:
		return None


def create_classifier() -> IntentClassifier:
	"""LLM classifier when a key is configured, local heuristics otherwise."""
	if settings.LLM_API_KEY:
		logger.info(f"[Classifier] Using LLM classifier ({settings.LLM_MODEL})")
		return LLMIntentClassifier()
	logger.warning("[Classifier] LLM_API_KEY not set, using local heuristic classifier")
	return LocalIntentClassifier()
