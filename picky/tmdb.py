"""
TMDB HTTP client.

Thin async wrapper around the TMDB v3 REST API:
	GET /search/multi?query=...&page=...&language=...&include_adult=...
	GET /{movie|tv}/{id}/similar
	GET /discover/{movie|tv}?with_genres=...
	GET /search/company, /search/keyword
	GET /{movie|tv}/{id}/watch/providers
	GET /movie/{id}/release_dates, /tv/{id}/content_ratings

Responses are returned as plain dicts/lists; picky.normalizer maps them to ResultItem.
"""

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from . import settings
from .errors import CollaboratorError


class TmdbClient:
	"""
	TMDB HTTP API client.

	Attributes:
		base_url: TMDB v3 endpoint (e.g., https://api.themoviedb.org/3)
	"""

	def __init__(
		self,
		api_key: str = settings.TMDB_API_KEY,
		base_url: str = settings.TMDB_BASE_URL,
		language: str = settings.TMDB_LANGUAGE,
		client: Optional[httpx.AsyncClient] = None,
	) -> None:
		self.api_key = api_key
		self.base_url = base_url.rstrip("/")
		self.language = language
		self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_S)

	async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
		"""
		GET a TMDB path.

		Raises:
			CollaboratorError: transport failure, non-2xx status or non-JSON body
		"""
		query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
		query["api_key"] = self.api_key
		try:
			response = await self.client.get(f"{self.base_url}{path}", params=query)
			response.raise_for_status()
			data = response.json()
		except httpx.HTTPStatusError as e:
			raise CollaboratorError("tmdb", f"GET {path} -> {e.response.status_code}", e.response.status_code) from e
		except httpx.HTTPError as e:
			raise CollaboratorError("tmdb", f"GET {path} failed: {e}") from e
		except ValueError as e:
			raise CollaboratorError("tmdb", f"GET {path} returned invalid JSON") from e
		return data if isinstance(data, dict) else {}

	@staticmethod
	def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
		results = data.get("results")
		return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []

	async def search_multi(
		self,
		query: str,
		page: int = 1,
		language: Optional[str] = None,
		include_adult: bool = False,
	) -> List[Dict[str, Any]]:
		data = await self._get(
			"/search/multi",
			{
				"query": query,
				"page": page,
				"language": language or self.language,
				"include_adult": "true" if include_adult else "false",
			},
		)
		results = self._results(data)
		logger.debug(f"[TMDB] search/multi '{query}' -> {len(results)} hits")
		return results

	async def similar(self, media_type: str, tmdb_id: int, page: int = 1, language: Optional[str] = None) -> List[Dict[str, Any]]:
		data = await self._get(f"/{media_type}/{tmdb_id}/similar", {"page": page, "language": language or self.language})
		return self._results(data)

	async def discover(self, media_type: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
		data = await self._get(f"/discover/{media_type}", params)
		results = self._results(data)
		logger.debug(f"[TMDB] discover/{media_type} -> {len(results)} hits")
		return results

	async def search_company(self, name: str) -> Optional[int]:
		"""Id of the best matching production company, or None."""
		return self._first_id(await self._get("/search/company", {"query": name, "page": 1}))

	async def search_keyword(self, name: str) -> Optional[int]:
		"""Id of the best matching TMDB keyword, or None."""
		return self._first_id(await self._get("/search/keyword", {"query": name, "page": 1}))

	def _first_id(self, data: Dict[str, Any]) -> Optional[int]:
		for row in self._results(data):
			value = row.get("id")
			if isinstance(value, int) and not isinstance(value, bool):
				return value
		return None

	async def watch_providers(self, media_type: str, tmdb_id: int, region: str) -> List[Dict[str, Any]]:
		"""Flatrate (subscription) providers of a title in one region."""
		data = await self._get(f"/{media_type}/{tmdb_id}/watch/providers")
		regions = data.get("results")
		block = regions.get(region) if isinstance(regions, dict) else None
		if not isinstance(block, dict):
			return []
		flatrate = block.get("flatrate")
		return [p for p in flatrate if isinstance(p, dict)] if isinstance(flatrate, list) else []

	async def age_rating(self, media_type: str, tmdb_id: int, region: str) -> Optional[str]:
		"""Certification (movie) or content rating (tv) in one region, or None."""
		if media_type == "movie":
			data = await self._get(f"/movie/{tmdb_id}/release_dates")
			for row in self._results(data):
				if row.get("iso_3166_1") != region:
					continue
				for release in row.get("release_dates") or []:
					cert = release.get("certification") if isinstance(release, dict) else None
					if isinstance(cert, str) and cert.strip():
						return cert.strip()
			return None

		data = await self._get(f"/tv/{tmdb_id}/content_ratings")
		for row in self._results(data):
			if row.get("iso_3166_1") == region:
				rating = row.get("rating")
				if isinstance(rating, str) and rating.strip():
					return rating.strip()
		return None

	async def close(self) -> None:
		"""Close HTTP client"""
		await self.client.aclose()
