"""
Result normalization module.
Maps the raw TMDB payloads of each retrieval source (multi search, similar items,
discover) into the single ResultItem shape. Every field is read with a safe default;
a hit that cannot be identified maps to None and is dropped by the caller.
"""

# Typing helpers for the loosely-typed TMDB dicts
from typing import Any, Dict, List, Optional  # type hints

# Our structured result record
from .models import MEDIA_TYPES, ProviderBadge, ResultItem  # normalized shapes

MAX_PROVIDERS = 6  # badges shown per title


def _text(value: Any) -> str:
	"""Trimmed string, '' for anything that is not a string."""
	return value.strip() if isinstance(value, str) else ""


def _opt_text(value: Any) -> Optional[str]:
	"""Trimmed string, None when missing or blank."""
	text = _text(value)
	return text or None


def _number(value: Any, default: float = 0.0) -> float:
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return default
	return float(value)


def _tmdb_id(value: Any) -> Optional[int]:
	if isinstance(value, bool) or not isinstance(value, int):
		return None
	return value


def _genre_ids(value: Any) -> List[int]:
	if not isinstance(value, list):
		return []
	return [g for g in value if isinstance(g, int) and not isinstance(g, bool)]


def _build(raw: Dict[str, Any], media_type: str, source: str) -> Optional[ResultItem]:
	"""Common field mapping; movie and tv differ only in the title and date field names."""
	tmdb_id = _tmdb_id(raw.get("id"))
	if tmdb_id is None or media_type not in MEDIA_TYPES:
		return None

	if media_type == "movie":
		title = _text(raw.get("title")) or _text(raw.get("original_title"))  # title, then original title, then ''
		release_date = _opt_text(raw.get("release_date"))
	else:
		title = _text(raw.get("name")) or _text(raw.get("original_name"))
		release_date = _opt_text(raw.get("first_air_date"))

	return ResultItem(
		id=tmdb_id,
		media_type=media_type,
		title=title,
		overview=_text(raw.get("overview")),  # '' when missing
		poster_path=_opt_text(raw.get("poster_path")),  # None when missing
		backdrop_path=_opt_text(raw.get("backdrop_path")),
		vote_average=_number(raw.get("vote_average")),  # 0.0 when missing
		vote_count=int(_number(raw.get("vote_count"))),  # 0 when missing
		release_date=release_date,
		genre_ids=_genre_ids(raw.get("genre_ids")),  # [] when missing
		original_language=_opt_text(raw.get("original_language")),
		source=source,
	)


def from_search_hit(raw: Any) -> Optional[ResultItem]:
	"""Multi search hit; its media type comes from the hit itself (person hits map to None)."""
	if not isinstance(raw, dict):
		return None
	return _build(raw, _text(raw.get("media_type")).lower(), "search")


def from_similar_hit(raw: Any, media_type: str) -> Optional[ResultItem]:
	"""Similar-items hit; the media type is the one of the title it was keyed on."""
	if not isinstance(raw, dict):
		return None
	return _build(raw, media_type, "similar")


def from_discover_hit(raw: Any, media_type: str) -> Optional[ResultItem]:
	"""Discover hit; the media type is the one of the discover endpoint that returned it."""
	if not isinstance(raw, dict):
		return None
	return _build(raw, media_type, "recommend")


def provider_badges(raw_providers: Any) -> List[ProviderBadge]:
	"""Map TMDB flatrate provider rows to badges, skipping rows without an id or a name."""
	if not isinstance(raw_providers, list):
		return []
	badges: List[ProviderBadge] = []
	seen = set()
	for row in raw_providers:
		if not isinstance(row, dict):
			continue
		provider_id = _tmdb_id(row.get("provider_id"))
		name = _text(row.get("provider_name"))
		if provider_id is None or not name or provider_id in seen:
			continue
		seen.add(provider_id)
		badges.append(ProviderBadge(provider_id=provider_id, provider_name=name, logo_path=_opt_text(row.get("logo_path"))))
	return badges[:MAX_PROVIDERS]
