"""
Feedback text cleanup.

Model output is squeezed through a fixed series of small steps so every reply
a child hears has one space between words, no stuttered repeats, no question
left hanging after a correct answer, the closing phrase at the end and a
bounded length. Each step is a plain function over a string and can be used
on its own.
"""

from __future__ import annotations
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_TRAILING_PUNCT = re.compile(r"[\s.!?,;:]+$")

# Pipeline passes before giving up on reaching a fixed point
_MAX_PASSES = 8


class NormalizeOptions(BaseModel):
	model_config = ConfigDict(frozen=True)

	enforce_no_question_if_correct: bool = False
	required_ending: Optional[str] = None
	max_length: Optional[int] = None


def collapse_whitespace(text: str) -> str:
	return re.sub(r"\s+", " ", text or "").strip()


def collapse_duplicate(text: str) -> str:
	"""Collapse ``"<S> <S>"`` (or two identical halves) into one copy."""
	s = text
	while s:
		doubled = re.match(r"^(.+)\s+\1$", s, flags=re.DOTALL)
		if doubled:
			s = doubled.group(1).strip()
			continue
		half, rem = divmod(len(s), 2)
		if half and not rem and s[:half] == s[half:]:
			s = s[:half].strip()
			continue
		break
	return s


def split_sentences(text: str) -> List[str]:
	return [part for part in _SENTENCE_SPLIT.split(text) if part]


def drop_repeated_sentences(text: str) -> str:
	kept: List[str] = []
	for sentence in split_sentences(text):
		if kept and sentence == kept[-1]:
			continue
		kept.append(sentence)
	return " ".join(kept)


def strip_trailing_questions(text: str) -> str:
	"""Cut back to the previous sentence boundary while the text ends in '?'.

	Returns an empty string when nothing but questions was left.
	"""
	s = text.strip()
	while s.endswith("?"):
		body = s[:-1]
		cut = max(body.rfind("."), body.rfind("!"), body.rfind("?"))
		s = body[: cut + 1].strip() if cut >= 0 else ""
	return s


def enforce_ending(text: str, ending: str) -> str:
	s = text.strip()
	if s.endswith(ending):
		return s
	body = _TRAILING_PUNCT.sub("", s)
	if not body:
		return ending
	return f"{body}. {ending}"


def _cut_at_word(text: str, limit: int) -> str:
	if limit <= 0:
		return ""
	if len(text) <= limit:
		return text
	clipped = text[:limit]
	space = clipped.rfind(" ")
	# Only back off to a word boundary if it keeps most of the text
	if space > limit // 2:
		clipped = clipped[:space]
	return clipped.rstrip()


def truncate(text: str, max_length: int, ending: Optional[str] = None) -> str:
	if len(text) <= max_length:
		return text
	if not ending or not text.endswith(ending):
		return _cut_at_word(text, max_length)
	if len(ending) >= max_length:
		return ending[:max_length]
	body = _TRAILING_PUNCT.sub("", text[: -len(ending)])
	body = _TRAILING_PUNCT.sub("", _cut_at_word(body, max_length - len(ending) - 2))
	return f"{body}. {ending}" if body else ending


def _run_pipeline(text: str, options: NormalizeOptions) -> str:
	s = collapse_whitespace(text)
	s = collapse_duplicate(s)
	s = drop_repeated_sentences(s)
	if options.enforce_no_question_if_correct:
		# The question usually sits just before the closing phrase
		if options.required_ending and s.endswith(options.required_ending):
			s = s[: -len(options.required_ending)].strip()
		s = strip_trailing_questions(s)
	if options.required_ending:
		s = enforce_ending(s, options.required_ending)
	if options.max_length is not None:
		s = truncate(s, options.max_length, options.required_ending)
	return s


def normalize(text: str, options: NormalizeOptions = NormalizeOptions()) -> str:
	"""Clean model output into a reply that satisfies ``options``.

	The pipeline is re-run until its output stops changing, which makes
	``normalize`` idempotent even when truncation exposes a repeat.
	"""
	current = _run_pipeline(text, options)
	for _ in range(_MAX_PASSES):
		following = _run_pipeline(current, options)
		if following == current:
			break
		current = following
	return current


def has_feedback(text: str, options: NormalizeOptions = NormalizeOptions()) -> bool:
	"""True when ``text`` says something beyond the required closing phrase."""
	s = text.strip()
	if options.required_ending and s.endswith(options.required_ending):
		s = s[: -len(options.required_ending)]
	return bool(_TRAILING_PUNCT.sub("", s))
