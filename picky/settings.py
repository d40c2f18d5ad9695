"""
Runtime settings for Picky search.
Every value can be overridden through an environment variable of the same name.
"""

import os

# TMDB (metadata, search, discover)
TMDB_API_KEY = os.getenv("TMDB_API_KEY", "")
TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_LANGUAGE = os.getenv("TMDB_LANGUAGE", "ko-KR")
TMDB_REGION = os.getenv("TMDB_REGION", "KR")

HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", 10))

# Intent classifier (OpenAI-compatible chat completions endpoint)
LLM_ENDPOINT = os.getenv("LLM_ENDPOINT", "https://api.openai.com/v1/chat/completions")
LLM_API_KEY = os.getenv("LLM_API_KEY", "")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")

# Search pipeline
INTENT_CONFIDENCE_MIN = float(os.getenv("INTENT_CONFIDENCE_MIN", 0.35))
MAX_QUERY_VARIANTS = int(os.getenv("MAX_QUERY_VARIANTS", 6))
DEFAULT_LIMIT = int(os.getenv("DEFAULT_LIMIT", 24))
ENRICH_CONCURRENCY = int(os.getenv("ENRICH_CONCURRENCY", 6))

LOG_LEVEL = os.getenv("LOG_LEVEL", "info")  # uvicorn log level

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", 8000))
