from __future__ import annotations
from typing import Callable

from fastapi import Request

from .cache import ResponseCache
from .evaluator import AnswerPolicy
from .openai_client import OpenAIClient
from .settings import settings

ClientFactory = Callable[[], OpenAIClient]


def get_coach_cache(request: Request) -> ResponseCache[str]:
	return request.app.state.coach_cache


def get_tts_cache(request: Request) -> ResponseCache[bytes]:
	return request.app.state.tts_cache


def get_client_factory() -> ClientFactory:
	# Clients are built per request, after validation, and closed by the caller
	return OpenAIClient


def get_answer_policy() -> AnswerPolicy:
	return AnswerPolicy(
		strip_punctuation=settings.answer_strip_punctuation,
		detect_hedges=settings.answer_detect_hedges,
	)
