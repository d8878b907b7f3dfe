"""
Pytest Configuration

Shared fixtures for the coach API test suite. Upstream OpenAI calls are
replaced by ``FakeOpenAIClient`` through FastAPI dependency overrides.
"""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from coli_api.deps import get_client_factory
from coli_api.main import app


class FakeOpenAIClient:
	"""Stands in for ``OpenAIClient``; records calls and returns canned output."""

	def __init__(self, reply: str = "", audio: bytes = b"ID3-fake-mp3", error: Optional[Exception] = None):
		self.reply = reply
		self.audio = audio
		self.error = error
		self.generate_calls: List[tuple] = []
		self.synthesize_calls: List[str] = []
		self.closed = 0

	async def generate(self, system: str, user: str) -> str:
		self.generate_calls.append((system, user))
		if self.error is not None:
			raise self.error
		return self.reply

	async def synthesize(self, text: str, *, voice: Optional[str] = None) -> bytes:
		self.synthesize_calls.append(text)
		if self.error is not None:
			raise self.error
		return self.audio

	async def aclose(self) -> None:
		self.closed += 1


@pytest.fixture
def fake_client():
	return FakeOpenAIClient(reply="Wonderful job! 안녕 is perfect.")


@pytest.fixture
def api(fake_client):
	"""TestClient with the lifespan running and OpenAI replaced by ``fake_client``."""
	app.dependency_overrides[get_client_factory] = lambda: (lambda: fake_client)
	try:
		with TestClient(app) as client:
			yield client
	finally:
		app.dependency_overrides.clear()
