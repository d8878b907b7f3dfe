"""
Tests for the HTTP endpoints
"""

from fastapi.testclient import TestClient

from coli_api.character import CLOSING_PHRASE
from coli_api.deps import get_answer_policy, get_client_factory
from coli_api.errors import UpstreamFailure
from coli_api.evaluator import AnswerPolicy
from coli_api.fallback import fallback_line
from coli_api.main import app
from coli_api.settings import settings

ORIGIN = "https://ottiya.com"


class TestCoachEndpoint:
	"""Test cases for POST /api/coach."""

	def test_correct_answer(self, api, fake_client):
		fake_client.reply = "Wonderful job! Wonderful job! Can you say it again?"
		r = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕"})
		assert r.status_code == 200
		data = r.json()
		assert data["replyText"] == f"Wonderful job. {CLOSING_PHRASE}"
		assert data["outcome"] == "correct"
		assert data["animation"] == {"coli": "wave", "bori": "wave"}
		assert data["debug"] == {
			"pauseId": "p3",
			"choice": "안녕",
			"isCorrect": True,
			"isUnsure": False,
			"cached": False,
			"fallback": False,
		}
		assert fake_client.closed == 1

	def test_prompt_carries_personalization(self, api, fake_client):
		api.post(
			"/api/coach",
			json={"pauseId": "p2", "choice": "학생", "profile": {"name": "Mina", "interest": "dinos"}},
		)
		system, user = fake_client.generate_calls[0]
		assert "Dr. Coli" in system
		assert "Name: Mina." in user
		assert "Theme word: Dino power!." in user
		assert "isCorrect=false" in user

	def test_second_request_is_cached(self, api, fake_client):
		body = {"pauseId": "p1", "choice": "한국어", "profile": {"name": "Jun"}}
		first = api.post("/api/coach", json=body).json()
		second = api.post("/api/coach", json=body).json()
		assert len(fake_client.generate_calls) == 1
		assert second["replyText"] == first["replyText"]
		assert second["debug"]["cached"] is True
		assert len(app.state.coach_cache) == 1

	def test_different_name_is_not_served_from_cache(self, api, fake_client):
		api.post("/api/coach", json={"pauseId": "p1", "choice": "한국어", "profile": {"name": "Jun"}})
		api.post("/api/coach", json={"pauseId": "p1", "choice": "한국어", "profile": {"name": "Mina"}})
		assert len(fake_client.generate_calls) == 2

	def test_unsure_answer(self, api, fake_client):
		r = api.post("/api/coach", json={"pauseId": "p4", "choice": "I don't know"})
		data = r.json()
		assert data["outcome"] == "unsure"
		assert data["debug"]["isUnsure"] is True
		assert data["animation"] == {"coli": "talk", "bori": "idle"}

	def test_upstream_failure_uses_fallback(self, api, fake_client):
		fake_client.error = UpstreamFailure("OpenAI error", status=500, details="boom")
		r = api.post("/api/coach", json={"pauseId": "p2", "choice": "학생", "profile": {"name": "Mina"}})
		assert r.status_code == 200
		data = r.json()
		assert data["replyText"] == fallback_line("wrong", name="Mina", correct_answer="선생님")
		assert data["debug"]["fallback"] is True
		assert len(app.state.coach_cache) == 0
		assert fake_client.closed == 1

	def test_empty_reply_uses_fallback(self, api, fake_client):
		fake_client.reply = "   "
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕"}).json()
		assert data["debug"]["fallback"] is True
		assert data["replyText"].startswith("You got it!")
		assert data["replyText"].endswith(CLOSING_PHRASE)

	def test_question_only_reply_on_correct_uses_fallback(self, api, fake_client):
		fake_client.reply = "Can you say it one more time?"
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕"}).json()
		assert data["debug"]["fallback"] is True
		assert "?" not in data["replyText"]

	def test_reply_is_bounded(self, api, fake_client):
		fake_client.reply = " ".join(f"word{i}" for i in range(200))
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "네"}).json()
		assert len(data["replyText"]) <= settings.feedback_max_chars
		assert data["replyText"].endswith(CLOSING_PHRASE)

	def test_punctuation_policy_override(self, api):
		app.dependency_overrides[get_answer_policy] = lambda: AnswerPolicy(strip_punctuation=False)
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕!"}).json()
		assert data["outcome"] == "wrong"

	def test_missing_pause_id(self, api, fake_client):
		r = api.post("/api/coach", json={"choice": "안녕"})
		assert r.status_code == 400
		assert r.json() == {"error": "Missing pauseId"}
		assert fake_client.generate_calls == []

	def test_unknown_pause_id(self, api):
		r = api.post("/api/coach", json={"pauseId": "p9", "choice": "안녕"})
		assert r.status_code == 400
		assert r.json() == {"error": "Unknown pauseId", "pauseId": "p9"}

	def test_invalid_json(self, api):
		r = api.post("/api/coach", content="{not json", headers={"Content-Type": "application/json"})
		assert r.status_code == 400
		assert r.json() == {"error": "Invalid JSON body"}

	def test_wrong_field_type(self, api):
		r = api.post("/api/coach", json={"pauseId": "p1", "choice": ["한국어"]})
		assert r.status_code == 400
		assert r.json()["error"] == "Invalid request body"
		assert "choice" in r.json()["fields"]

	def test_get_not_allowed(self, api):
		r = api.get("/api/coach")
		assert r.status_code == 405
		assert r.json() == {"error": "Use POST"}

	def test_correct_reply_question_before_closing_phrase(self, api, fake_client):
		fake_client.reply = f"You got it! Can you say it again? {CLOSING_PHRASE}"
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕"}).json()
		assert data["replyText"] == f"You got it. {CLOSING_PHRASE}"
		assert "?" not in data["replyText"]
		assert data["debug"]["fallback"] is False

	def test_null_profile(self, api):
		r = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕", "profile": None})
		assert r.status_code == 200
		assert r.json()["outcome"] == "correct"

	def test_null_profile_fields(self, api, fake_client):
		r = api.post(
			"/api/coach",
			json={"pauseId": "p3", "choice": "안녕", "profile": {"name": None, "interest": None}},
		)
		assert r.status_code == 200
		_, user = fake_client.generate_calls[0]
		assert "Name:" not in user

	def test_null_choice_is_unsure(self, api):
		r = api.post("/api/coach", json={"pauseId": "p3", "choice": None})
		assert r.status_code == 200
		assert r.json()["outcome"] == "unsure"
		assert r.json()["debug"]["choice"] == ""


class TestLessonSteps:
	"""Test cases for the non-scored stepType lines on POST /api/coach."""

	def test_teach(self, api, fake_client):
		r = api.post("/api/coach", json={"pauseId": "p2", "stepType": "teach"})
		assert r.status_code == 200
		data = r.json()
		assert data["replyText"] == 'This word is "선생님". It means "teacher".'
		assert data["step"] == "teach"
		assert data["outcome"] is None
		assert data["animation"] == {"coli": "talk", "bori": "look"}
		assert fake_client.generate_calls == []

	def test_respect_bows(self, api):
		data = api.post("/api/coach", json={"pauseId": "p4", "stepType": "respect"}).json()
		assert data["replyText"] == 'When we say "안녕하세요", we do a small bow to show respect.'
		assert data["animation"] == {"coli": "bow", "bori": "bow"}

	def test_transition_needs_no_pause_id(self, api):
		data = api.post("/api/coach", json={"stepType": "transition"}).json()
		assert data["replyText"] == CLOSING_PHRASE
		assert data["animation"] == {"coli": "idle", "bori": "idle"}

	def test_wrap_up_with_name(self, api):
		data = api.post("/api/coach", json={"stepType": "wrap_up", "profile": {"name": "Mina"}}).json()
		assert data["replyText"].startswith("Mina, Thank you for learning with me today!")

	def test_answer_step_is_scored(self, api):
		data = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕", "stepType": "answer"}).json()
		assert data["step"] == "answer"
		assert data["outcome"] == "correct"

	def test_teach_without_pause_id(self, api):
		r = api.post("/api/coach", json={"stepType": "teach"})
		assert r.status_code == 400
		assert r.json() == {"error": "Missing pauseId"}

	def test_teach_with_unknown_pause_id(self, api):
		r = api.post("/api/coach", json={"pauseId": "p9", "stepType": "teach"})
		assert r.status_code == 400
		assert r.json() == {"error": "Unknown pauseId", "pauseId": "p9"}

	def test_unknown_step_type(self, api, fake_client):
		r = api.post("/api/coach", json={"pauseId": "p1", "stepType": "dance"})
		assert r.status_code == 400
		assert r.json() == {"error": "Unknown stepType", "stepType": "dance"}
		assert fake_client.generate_calls == []

	def test_missing_api_key(self, monkeypatch):
		monkeypatch.setattr(settings, "openai_api_key", None)
		with TestClient(app) as client:
			r = client.post("/api/coach", json={"pauseId": "p1", "choice": "한국어"})
		assert r.status_code == 500
		assert r.json() == {"error": "Missing OPENAI_API_KEY on server"}

	def test_unexpected_error(self, fake_client):
		fake_client.error = RuntimeError("kaboom")
		app.dependency_overrides[get_client_factory] = lambda: (lambda: fake_client)
		try:
			with TestClient(app, raise_server_exceptions=False) as client:
				r = client.post("/api/coach", json={"pauseId": "p1", "choice": "한국어"})
		finally:
			app.dependency_overrides.clear()
		assert r.status_code == 500
		assert r.json() == {"error": "Server crashed"}


class TestTTSEndpoint:
	"""Test cases for POST /api/tts."""

	def test_miss_then_hit(self, api, fake_client):
		first = api.post("/api/tts", json={"text": " 안녕하세요! "})
		assert first.status_code == 200
		assert first.content == fake_client.audio
		assert first.headers["content-type"] == "audio/mpeg"
		assert first.headers["x-tts-cache"] == "MISS"
		assert first.headers["cache-control"] == "no-store"

		second = api.post("/api/tts", json={"text": "안녕하세요!"})
		assert second.content == fake_client.audio
		assert second.headers["x-tts-cache"] == "HIT"
		assert fake_client.synthesize_calls == ["안녕하세요!"]

	def test_missing_text(self, api):
		r = api.post("/api/tts", json={"text": "   "})
		assert r.status_code == 400
		assert r.json() == {"error": "Missing text"}

	def test_text_too_long(self, api, fake_client):
		r = api.post("/api/tts", json={"text": "a" * (settings.tts_max_chars + 1)})
		assert r.status_code == 400
		assert r.json() == {"error": f"Text too long (max {settings.tts_max_chars} chars)"}
		assert fake_client.synthesize_calls == []

	def test_upstream_failure(self, api, fake_client):
		fake_client.error = UpstreamFailure("TTS upstream error", status=500, details="server down")
		r = api.post("/api/tts", json={"text": "hello"})
		assert r.status_code == 502
		assert r.json() == {"error": "TTS upstream error", "status": 500, "details": "server down"}
		assert len(app.state.tts_cache) == 0
		assert fake_client.closed == 1

	def test_get_not_allowed(self, api):
		assert api.get("/api/tts").status_code == 405


class TestCors:
	"""Test cases for the origin allow-list."""

	def test_preflight_allowed_origin(self, api):
		r = api.options(
			"/api/coach",
			headers={"Origin": ORIGIN, "Access-Control-Request-Method": "POST"},
		)
		assert r.status_code == 204
		assert r.content == b""
		assert r.headers["access-control-allow-origin"] == ORIGIN
		assert "POST" in r.headers["access-control-allow-methods"]

	def test_preflight_disallowed_origin(self, api):
		r = api.options(
			"/api/coach",
			headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
		)
		assert r.status_code == 204
		assert "access-control-allow-origin" not in r.headers

	def test_options_without_origin(self, api):
		r = api.options("/api/tts")
		assert r.status_code == 204
		assert "access-control-allow-origin" not in r.headers

	def test_options_without_request_method(self, api):
		r = api.options("/api/coach", headers={"Origin": ORIGIN})
		assert r.status_code == 204
		assert r.headers["access-control-allow-origin"] == ORIGIN

	def test_simple_request_echoes_origin(self, api):
		r = api.post("/api/coach", json={"pauseId": "p3", "choice": "안녕"}, headers={"Origin": ORIGIN})
		assert r.headers["access-control-allow-origin"] == ORIGIN
		assert "Origin" in r.headers["vary"]


class TestHealth:
	"""Test cases for the health endpoints."""

	def test_health(self, api):
		assert api.get("/health").json() == {"status": "ok"}

	def test_info(self, api, monkeypatch):
		monkeypatch.setattr(settings, "openai_api_key", "sk-test")
		assert api.get("/info").json() == {"status": "ok", "openai_configured": True}
