from __future__ import annotations
import json
import threading
from typing import Dict, Generic, Optional, TypeVar

from .evaluator import EvaluationResult

V = TypeVar("V")


class ResponseCache(Generic[V]):
	"""Best-effort cache that lives as long as the warm process.

	Once ``max_entries`` is reached, inserting a new key evicts the oldest
	inserted one. Overwriting an existing key keeps its position.
	"""

	def __init__(self, max_entries: int) -> None:
		if max_entries < 1:
			raise ValueError("max_entries must be at least 1")
		self.max_entries = max_entries
		# dicts keep insertion order, which is the eviction order
		self._entries: Dict[str, V] = {}
		self._lock = threading.Lock()

	def get(self, key: str) -> Optional[V]:
		with self._lock:
			return self._entries.get(key)

	def set(self, key: str, value: V) -> None:
		with self._lock:
			if key not in self._entries and len(self._entries) >= self.max_entries:
				oldest = next(iter(self._entries))
				del self._entries[oldest]
			self._entries[key] = value

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def __contains__(self, key: object) -> bool:
		with self._lock:
			return key in self._entries


def coach_cache_key(
	checkpoint_id: str,
	normalized_answer: str,
	result: EvaluationResult,
	*,
	name: str = "",
	interest: str = "",
) -> str:
	# Compact and stable; the name is part of the key since it appears in the reply
	return json.dumps(
		{
			"p": checkpoint_id,
			"c": normalized_answer,
			"n": name.strip().casefold(),
			"i": interest.strip().casefold(),
			"ok": int(result.is_correct),
			"un": int(result.is_unsure),
		},
		ensure_ascii=False,
		separators=(",", ":"),
		sort_keys=True,
	)
