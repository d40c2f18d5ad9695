"""
FastAPI server exposing the Picky search API.
Endpoints:
- GET /health: basic health check
- GET /search?q=...&limit=24: full search (expansion, intent, retrieval, ranking)
- GET /picky/search/multi?q=...: lexicon-expanded multi search only
- POST /picky/recommend: recommendation engine for a prompt and optional explicit filters
- GET /picky/expand?q=...: lexicon expansion and intent signals (debugging aid)
- GET /picky/quality?q=...: rule-based prompt quality check

Startup builds the TMDB client, the intent classifier and the engine once.
"""

# Import standard libraries for timing
import time  # measure startup and request latencies
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request/response models
from fastapi import FastAPI, HTTPException, Query  # FastAPI primitives
from pydantic import BaseModel, Field  # schema definitions

# Import our internal modules
from picky import settings  # runtime configuration
from picky.classifier import create_classifier  # AI or local intent classifier
from picky.errors import IntentClassificationError, RecommendationError  # fatal search failures
from picky.expander import expand_keywords, expand_query  # lexicon expansion
from picky.intent import infer_signals  # lexicon signals
from picky.models import ResultItem, SearchIntent  # domain records
from picky.query_parser import assess_quality, tokenize  # local query helpers
from picky.recommender import DiscoverRecommender  # discover engine
from picky.search_engine import SearchEngine  # core search engine
from picky.tmdb import TmdbClient  # TMDB HTTP client

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Picky Search API", version="1.0.0")  # web app

# Globals that hold the search engine instance and measured startup time
ENGINE: Optional[SearchEngine] = None  # will point to the initialized engine
TMDB: Optional[TmdbClient] = None  # shared connection pool, closed on shutdown
STARTUP_TIME_S: float = 0.0  # measures how long startup took


class ProviderOut(BaseModel):
	providerId: int
	providerName: str
	logoPath: Optional[str] = None


# Pydantic model that describes the shape of a single ranked title in responses
class ResultItemOut(BaseModel):
	id: int  # TMDB id
	mediaType: str  # movie or tv
	title: str  # display title
	overview: str = ""  # synopsis
	posterPath: Optional[str] = None  # poster image path
	backdropPath: Optional[str] = None  # backdrop image path
	voteAverage: float = 0.0  # 0..10
	voteCount: int = 0  # number of votes
	releaseDate: Optional[str] = None  # YYYY-MM-DD
	year: Optional[int] = None  # release year
	genreIds: List[int] = []  # TMDB genre ids
	originalLanguage: Optional[str] = None  # ISO 639-1
	providers: List[ProviderOut] = []  # streaming badges
	ageRating: Optional[str] = None  # certification
	matchScore: float = 0.0  # 0..100 relevance
	matchReasons: List[str] = []  # score explanations


# Pydantic model for the complete search response payload
class SearchOut(BaseModel):
	query: str  # original query string
	elapsed_ms: float  # server-side search time in ms
	intentSummary: Optional[Dict[str, Any]] = None  # what the engine understood, None for empty queries
	tags: List[str] = []  # display tags
	expandedQueries: List[str] = []  # variants sent to multi search
	results: List[ResultItemOut] = []  # ranked items


class MultiSearchOut(BaseModel):
	expandedQueries: List[str]
	results: List[ResultItemOut]


class RecommendIn(BaseModel):
	prompt: str = Field(..., description="Free-text request")
	mediaTypes: List[str] = []
	genreIds: List[int] = []
	yearFrom: Optional[int] = None
	yearTo: Optional[int] = None
	originalLanguage: Optional[str] = None
	includeKeywords: List[str] = []
	excludeKeywords: List[str] = []
	page: int = 1


class RecommendOut(BaseModel):
	items: List[ResultItemOut]


def to_out(item: ResultItem) -> ResultItemOut:
	"""Convert an engine result to the response schema."""
	return ResultItemOut(
		id=item.id,
		mediaType=item.media_type,
		title=item.title,
		overview=item.overview,
		posterPath=item.poster_path,
		backdropPath=item.backdrop_path,
		voteAverage=item.vote_average,
		voteCount=item.vote_count,
		releaseDate=item.release_date,
		year=item.year,
		genreIds=list(item.genre_ids),
		originalLanguage=item.original_language,
		providers=[
			ProviderOut(providerId=p.provider_id, providerName=p.provider_name, logoPath=p.logo_path)
			for p in item.providers
		],
		ageRating=item.age_rating,
		matchScore=round(item.match_score, 2),
		matchReasons=list(item.reasons),
	)


def _engine() -> SearchEngine:
	if ENGINE is None:  # engine must be ready to serve
		logger.warning("[API] Request received but engine not initialized")
		raise HTTPException(status_code=503, detail="Search engine not ready")
	return ENGINE


# FastAPI startup hook to initialize the search engine once
@app.on_event("startup")
async def startup_event():
	"""Initialize the collaborators and the search engine."""
	global ENGINE, TMDB, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	logger.info("[API] Startup: creating TMDB client, classifier and engine...")
	if not settings.TMDB_API_KEY:
		logger.warning("[API] TMDB_API_KEY is not set, every TMDB call will fail")

	TMDB = TmdbClient()
	ENGINE = SearchEngine(
		retriever=TMDB,
		classifier=create_classifier(),
		recommender=DiscoverRecommender(TMDB),
	)

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s")


@app.on_event("shutdown")
async def shutdown_event():
	"""Release HTTP connection pools."""
	if TMDB is not None:
		await TMDB.close()
	if ENGINE is not None:
		await ENGINE.classifier.close()
	logger.info("[API] Shutdown complete")


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": ENGINE is not None,  # True if engine initialized
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
	}


# Main search endpoint that accepts a free-text query
@app.get("/search", response_model=SearchOut)
async def search(
	q: str = Query("", description="Natural language movie/TV query"),
	limit: int = Query(settings.DEFAULT_LIMIT, ge=1, le=100),
):
	"""Execute a full search and return ranked results. No results is a 200 with an empty list."""
	engine = _engine()
	start = time.time()  # start timer
	logger.debug(f"[API] /search q='{q}' limit={limit}")

	try:
		response = await engine.search(q, limit=limit)
	except (IntentClassificationError, RecommendationError) as e:
		logger.error(f"[API] /search failed for '{q}': {e}")
		raise HTTPException(status_code=502, detail=f"Search failed: {e}") from e

	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /search served {len(response.results)} results in {elapsed_ms:.2f} ms")
	return SearchOut(
		query=q,
		elapsed_ms=round(elapsed_ms, 2),
		intentSummary=response.intent_summary.to_dict() if response.intent_summary else None,
		tags=response.tags,
		expandedQueries=response.expanded_queries,
		results=[to_out(item) for item in response.results],
	)


@app.get("/picky/search/multi", response_model=MultiSearchOut)
async def search_multi(
	q: str = Query("", description="Free-text query"),
	page: int = Query(1, ge=1),
	language: Optional[str] = None,
	includeAdult: bool = False,
):
	"""Lexicon-expanded multi search; failing variants are skipped."""
	response = await _engine().search_multi(q, page=page, language=language, include_adult=includeAdult)
	return MultiSearchOut(
		expandedQueries=response.expanded_queries,
		results=[to_out(item) for item in response.results],
	)


@app.post("/picky/recommend", response_model=RecommendOut)
async def recommend(body: RecommendIn):
	"""Recommendation engine for a prompt; explicit filters in the body win over local inference."""
	explicit = bool(body.mediaTypes or body.genreIds)
	intent = SearchIntent.from_payload(
		{
			"mediaTypes": body.mediaTypes,
			"genreIds": body.genreIds,
			"yearFrom": body.yearFrom,
			"yearTo": body.yearTo,
			"originalLanguage": body.originalLanguage,
			"includeKeywords": body.includeKeywords,
			"excludeKeywords": body.excludeKeywords,
			"confidence": 1.0 if explicit else 0.0,
		}
	)
	try:
		items = await _engine().recommend(body.prompt, intent=intent, page=body.page)
	except RecommendationError as e:
		logger.error(f"[API] /picky/recommend failed: {e}")
		raise HTTPException(status_code=502, detail=f"Recommendation failed: {e}") from e
	return RecommendOut(items=[to_out(item) for item in items])


@app.get("/picky/expand")
async def expand(q: str = Query(..., description="Free-text query")):
	"""Show how the lexicon reads a prompt."""
	signals = infer_signals(q)
	return {
		"expandedQueries": expand_query(q, settings.MAX_QUERY_VARIANTS),
		"expandedKeywords": expand_keywords(tokenize(q)),
		"includeExpanded": signals.include_expanded,
		"companyQueries": signals.company_queries,
		"detectedOriginalLanguage": signals.detected_original_language,
	}


@app.get("/picky/quality")
async def quality(q: str = Query("", description="Free-text query")):
	"""Rule-based prompt quality check."""
	result = assess_quality(q)
	return {"ok": result.ok, "reason": result.reason}


if __name__ == "__main__":
	import uvicorn

	uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_level=settings.LOG_LEVEL)
