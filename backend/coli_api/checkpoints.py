"""
Lesson checkpoints.

Each pause in the lesson video asks the child for one Korean phrase. The
table is declared as plain data and validated into ``Checkpoint`` models on
import, so a typo in an id or an empty answer fails at startup rather than
on the first request.
"""

from __future__ import annotations
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import UnknownCheckpoint

_ID_PATTERN = re.compile(r"^p[1-9][0-9]*$")


class Checkpoint(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	correct_answer: str
	prompt_label: str
	# English meaning, used by the canned "you got it" line
	meaning: Optional[str] = None

	@field_validator("id")
	@classmethod
	def _check_id(cls, value: str) -> str:
		if not _ID_PATTERN.match(value):
			raise ValueError(f"checkpoint id must look like p1, p2, ... (got {value!r})")
		return value

	@field_validator("correct_answer", "prompt_label")
	@classmethod
	def _not_blank(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("must not be empty")
		return value


_RAW_CHECKPOINTS: Dict[str, Dict[str, Any]] = {
	"p1": {"correct_answer": "한국어", "prompt_label": "say 'Korean language' in Korean", "meaning": "Korean language"},
	"p2": {"correct_answer": "선생님", "prompt_label": "say 'teacher' in Korean", "meaning": "teacher"},
	"p3": {"correct_answer": "안녕", "prompt_label": "hello to friends", "meaning": "hi"},
	"p4": {"correct_answer": "안녕하세요", "prompt_label": "polite hello", "meaning": "hello"},
	"p5": {
		"correct_answer": "안녕하세요 with a bow",
		"prompt_label": "say 안녕하세요 with respect (a bow)",
		"meaning": "hello, with respect",
	},
}


def _load(raw: Dict[str, Dict[str, Any]]) -> Dict[str, Checkpoint]:
	table: Dict[str, Checkpoint] = {}
	for key, fields in raw.items():
		checkpoint = Checkpoint(id=key, **fields)
		if checkpoint.id in table:
			raise ValueError(f"duplicate checkpoint id {checkpoint.id}")
		table[checkpoint.id] = checkpoint
	return table


CHECKPOINTS: Dict[str, Checkpoint] = _load(_RAW_CHECKPOINTS)


def get_checkpoint(checkpoint_id: str) -> Checkpoint:
	try:
		return CHECKPOINTS[checkpoint_id]
	except KeyError:
		raise UnknownCheckpoint(checkpoint_id) from None
