from __future__ import annotations
from typing import Any, Dict, Optional


class CoachError(Exception):
	"""Base class for failures that map onto an HTTP error response."""

	status_code: int = 500

	def __init__(self, message: str, **extra: Any) -> None:
		super().__init__(message)
		self.message = message
		self.extra: Dict[str, Any] = {k: v for k, v in extra.items() if v is not None}

	def to_dict(self) -> Dict[str, Any]:
		return {"error": self.message, **self.extra}


class InvalidInput(CoachError):
	"""Caller error: missing or unknown fields, malformed body. Not retried."""

	status_code = 400


class UnknownCheckpoint(InvalidInput):
	def __init__(self, checkpoint_id: str) -> None:
		super().__init__("Unknown pauseId", pauseId=checkpoint_id)
		self.checkpoint_id = checkpoint_id


class UpstreamFailure(CoachError):
	"""The generation or speech service was unreachable or returned non-success."""

	status_code = 502

	def __init__(self, message: str, *, status: Optional[int] = None, details: Optional[str] = None) -> None:
		super().__init__(message, status=status, details=details)
		self.status = status
		self.details = details


class ConfigurationError(CoachError):
	status_code = 500
