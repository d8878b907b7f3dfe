"""
Canned Dr. Coli lines.

Used when the text model is unavailable, slow or returns nothing usable, and
for lesson steps that never needed a model in the first place. Nothing here
touches the network.
"""

from __future__ import annotations
import re
from typing import Optional

from .character import CLOSING_PHRASE
from .evaluator import Outcome


def _name_prefix(name: Optional[str]) -> str:
	name = (name or "").strip()
	return f"{name}, " if name else ""


def _tidy(text: str) -> str:
	return re.sub(r"\s+", " ", text).strip()


def fallback_line(
	outcome: Outcome | str,
	*,
	name: Optional[str] = None,
	correct_answer: str = "",
	theme_word: Optional[str] = None,
	meaning: Optional[str] = None,
) -> str:
	"""Deterministic feedback sentence for an evaluation outcome.

	Always ends with the closing phrase. ``theme_word`` is only used on a
	correct answer, where there is something to celebrate.
	"""
	outcome = Outcome(outcome)
	prefix = _name_prefix(name)
	answer = correct_answer.strip()
	if outcome is Outcome.CORRECT:
		if answer and meaning:
			core = f'You got it! "{answer}" means "{meaning}".'
		elif answer:
			core = f'You got it! "{answer}" is right.'
		else:
			core = "You got it!"
		return _tidy(f"{prefix}{core} {theme_word or ''} {CLOSING_PHRASE}")
	if outcome is Outcome.UNSURE:
		core = f'That’s okay! The right answer is "{answer}".' if answer else "That’s okay! Let’s learn it together."
		return _tidy(f"{prefix}{core} {CLOSING_PHRASE}")
	core = f'Nice try! The right answer is "{answer}".' if answer else "Nice try!"
	return _tidy(f"{prefix}{core} {CLOSING_PHRASE}")


# Lesson steps that are not scored and never need the text model
STEP_TYPES = ("teach", "prompt", "respect", "transition", "wrap_up")


def step_line(
	step: str,
	*,
	name: Optional[str] = None,
	ko: str = "",
	en: str = "",
	theme_word: Optional[str] = None,
) -> str:
	"""Canned line for one of ``STEP_TYPES``."""
	prefix = _name_prefix(name)
	if step == "teach":
		return _tidy(f'{prefix}This word is "{ko}". It means "{en}". {theme_word or ""}')
	if step == "prompt":
		return f"{prefix}Now it’s your turn. Try it with me!"
	if step == "respect":
		return f'{prefix}When we say "{ko}", we do a small bow to show respect.'
	if step == "transition":
		return CLOSING_PHRASE
	if step == "wrap_up":
		return f"{prefix}Thank you for learning with me today! See you next time!"
	raise ValueError(f"unknown lesson step: {step}")
