from __future__ import annotations
from typing import NamedTuple, Optional

from .character import CLOSING_PHRASE
from .checkpoints import Checkpoint
from .evaluator import EvaluationResult


class CoachPrompt(NamedTuple):
	system: str
	user: str


# Kept short: prompt size dominates latency for a 70 token reply
SYSTEM_PROMPT = (
	"You are Dr. Coli, a friendly broccoli teacher for kids 6–8. "
	"Respond in warm, simple English. 1–2 sentences (max 3). "
	"Never mention AI or tech. Do not repeat yourself. "
	f'End with exactly: "{CLOSING_PHRASE}"'
)


def _flag(value: bool) -> str:
	return "true" if value else "false"


def build_coach_prompt(
	checkpoint: Checkpoint,
	answer: str,
	result: EvaluationResult,
	*,
	name: Optional[str] = None,
	theme_word: Optional[str] = None,
) -> CoachPrompt:
	name = (name or "").strip()
	theme_word = (theme_word or "").strip()
	name_prefix = f"{name}, " if name else ""
	parts = [
		f"Pause {checkpoint.id}. Goal: {checkpoint.prompt_label}. Correct: {checkpoint.correct_answer}. ",
		f'Child tapped: "{answer}". isCorrect={_flag(result.is_correct)}. isUnsure={_flag(result.is_unsure)}. ',
	]
	if name:
		parts.append(f"Name: {name}. ")
	if theme_word:
		parts.append(f"Theme word: {theme_word}. ")
	parts.append(
		"Rules: If correct, praise + confirm. If unsure, encourage + give correct phrase. "
		'If wrong, say "Nice try!" + give correct phrase + one tiny hint. '
	)
	if result.is_correct:
		parts.append("Do not ask a question. ")
	if name:
		parts.append(f'If you use the name, start with "{name_prefix}" (don’t overuse). ')
	if theme_word:
		parts.append(f'Include "{theme_word}" as a very short sentence before the ending. ')
	parts.append("Return plain text only.")
	return CoachPrompt(system=SYSTEM_PROMPT, user="".join(parts))
