from __future__ import annotations
import re
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from .checkpoints import get_checkpoint

# Phrases a child (or the speech recognizer) uses instead of an answer
HEDGE_PHRASES: Tuple[str, ...] = (
	"not sure",
	"don't know",
	"dont know",
	"i forgot",
	"forgot",
	"tried",
)


class Outcome(str, Enum):
	CORRECT = "correct"
	WRONG = "wrong"
	UNSURE = "unsure"


class AnswerPolicy(BaseModel):
	"""How forgiving answer matching is.

	Punctuation stripping and hedge detection are separate switches; speech
	to text tends to add stray punctuation, typed answers usually do not.
	"""

	model_config = ConfigDict(frozen=True)

	collapse_whitespace: bool = True
	strip_punctuation: bool = True
	ignore_case: bool = True
	detect_hedges: bool = True
	hedge_phrases: Tuple[str, ...] = HEDGE_PHRASES


class EvaluationResult(BaseModel):
	model_config = ConfigDict(frozen=True)

	is_correct: bool
	is_unsure: bool

	@property
	def outcome(self) -> Outcome:
		if self.is_correct:
			return Outcome.CORRECT
		if self.is_unsure:
			return Outcome.UNSURE
		return Outcome.WRONG


DEFAULT_POLICY = AnswerPolicy()


def normalize_answer(text: str, policy: AnswerPolicy = DEFAULT_POLICY) -> str:
	s = (text or "").strip()
	if policy.strip_punctuation:
		s = re.sub(r"[^\w\s]", "", s)
	if policy.collapse_whitespace:
		s = re.sub(r"\s+", " ", s)
	if policy.ignore_case:
		s = s.casefold()
	return s.strip()


def is_hedge(text: str, phrases: Tuple[str, ...] = HEDGE_PHRASES) -> bool:
	lowered = (text or "").replace("’", "'").casefold()
	return any(phrase in lowered for phrase in phrases)


def evaluate(checkpoint_id: str, raw_answer: str, policy: AnswerPolicy = DEFAULT_POLICY) -> EvaluationResult:
	"""Score a child's answer against the checkpoint's expected phrase.

	Raises ``UnknownCheckpoint`` for ids missing from the table.
	"""
	checkpoint = get_checkpoint(checkpoint_id)
	answer = normalize_answer(raw_answer, policy)
	# Hedges are matched on the trimmed raw text so apostrophes survive
	unsure = not answer or (policy.detect_hedges and is_hedge((raw_answer or "").strip(), policy.hedge_phrases))
	correct = not unsure and answer == normalize_answer(checkpoint.correct_answer, policy)
	return EvaluationResult(is_correct=correct, is_unsure=unsure)
