"""
Error types raised by the search pipeline.

Non-critical collaborator failures (a single query variant, the similar-items
lookup) are caught where they happen; the fatal ones below propagate to the caller.
"""

from typing import Optional


class PickyError(Exception):
	"""Base class for every error raised by this package."""


class CollaboratorError(PickyError):
	"""An external call (TMDB, LLM) failed at the transport or status level."""

	def __init__(self, collaborator: str, message: str, status_code: Optional[int] = None):
		super().__init__(f"{collaborator}: {message}")
		self.collaborator = collaborator
		self.status_code = status_code


class IntentClassificationError(PickyError):
	"""The AI intent classification could not be obtained."""


class RecommendationError(PickyError):
	"""The recommendation engine, the primary result source, failed."""


class SearchCancelledError(PickyError):
	"""A search was superseded by a newer request or cancelled by its caller."""
