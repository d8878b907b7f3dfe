from __future__ import annotations
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..cache import ResponseCache, coach_cache_key
from ..character import CLOSING_PHRASE, animation_for, theme_word
from ..checkpoints import Checkpoint, get_checkpoint
from ..deps import ClientFactory, get_answer_policy, get_client_factory, get_coach_cache
from ..errors import InvalidInput, UpstreamFailure
from ..evaluator import AnswerPolicy, evaluate, normalize_answer
from ..fallback import STEP_TYPES, fallback_line, step_line
from ..normalizer import NormalizeOptions, has_feedback, normalize
from ..prompts import build_coach_prompt
from ..settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["coach"])

# Step type for a scored answer; anything in STEP_TYPES is a canned line
ANSWER_STEP = "answer"

# Steps whose line names the checkpoint's phrase
_STEPS_NEEDING_CHECKPOINT = ("teach", "respect")


class _CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# The front-end sends null for fields it has no value for; null means absent
class Profile(_CamelModel):
	name: Optional[str] = None
	interest: Optional[str] = None


class CoachRequest(_CamelModel):
	pause_id: Optional[str] = None
	choice: Optional[str] = None
	step_type: Optional[str] = None
	profile: Optional[Profile] = None


class CoachDebug(_CamelModel):
	pause_id: str
	choice: str
	is_correct: Optional[bool] = None
	is_unsure: Optional[bool] = None
	cached: bool = False
	fallback: bool = False


class CoachResponse(_CamelModel):
	reply_text: str
	step: str = ANSWER_STEP
	outcome: Optional[str] = None
	animation: Dict[str, str]
	debug: CoachDebug


async def _generate_reply(client_factory: ClientFactory, system: str, user: str) -> Optional[str]:
	"""Ask the text model for a reply; ``None`` means use the canned line."""
	client = client_factory()
	try:
		return await client.generate(system, user)
	except UpstreamFailure as err:
		logger.warning("Coach generation failed, using fallback: %s (status=%s)", err.message, err.status)
		return None
	finally:
		await client.aclose()


def _step_response(step: str, pause_id: str, choice: str, child_name: str, interest: str) -> CoachResponse:
	checkpoint: Optional[Checkpoint] = None
	if pause_id:
		checkpoint = get_checkpoint(pause_id)
	elif step in _STEPS_NEEDING_CHECKPOINT:
		raise InvalidInput("Missing pauseId")
	reply = step_line(
		step,
		name=child_name,
		ko=checkpoint.correct_answer if checkpoint else "",
		en=(checkpoint.meaning or "") if checkpoint else "",
		theme_word=theme_word(interest),
	)
	return CoachResponse(
		reply_text=reply,
		step=step,
		animation=animation_for(step),
		debug=CoachDebug(pause_id=pause_id, choice=choice),
	)


@router.post("/coach", response_model=CoachResponse, response_model_by_alias=True)
async def coach(
	req: CoachRequest,
	cache: ResponseCache[str] = Depends(get_coach_cache),
	client_factory: ClientFactory = Depends(get_client_factory),
	policy: AnswerPolicy = Depends(get_answer_policy),
):
	profile = req.profile or Profile()
	pause_id = (req.pause_id or "").strip()
	choice = (req.choice or "").strip()
	step = (req.step_type or "").strip() or ANSWER_STEP
	child_name = (profile.name or "").strip()
	interest = (profile.interest or "").strip()

	if step in STEP_TYPES:
		return _step_response(step, pause_id, choice, child_name, interest)
	if step != ANSWER_STEP:
		raise InvalidInput("Unknown stepType", stepType=step)
	if not pause_id:
		raise InvalidInput("Missing pauseId")

	checkpoint = get_checkpoint(pause_id)
	result = evaluate(pause_id, choice, policy)
	outcome = result.outcome.value
	theme = theme_word(interest)

	key = coach_cache_key(
		pause_id,
		normalize_answer(choice, policy),
		result,
		name=child_name,
		interest=interest,
	)
	cached = cache.get(key)
	if cached is not None:
		logger.debug("Coach cache hit for %s", pause_id)
		return CoachResponse(
			reply_text=cached,
			outcome=outcome,
			animation=animation_for(outcome),
			debug=CoachDebug(pause_id=pause_id, choice=choice, is_correct=result.is_correct, is_unsure=result.is_unsure, cached=True),
		)

	prompt = build_coach_prompt(checkpoint, choice, result, name=child_name, theme_word=theme)
	raw = await _generate_reply(client_factory, prompt.system, prompt.user)

	options = NormalizeOptions(
		enforce_no_question_if_correct=result.is_correct,
		required_ending=CLOSING_PHRASE,
		max_length=settings.feedback_max_chars,
	)
	reply = normalize(raw, options) if raw else ""
	used_fallback = not has_feedback(reply, options)
	if used_fallback:
		reply = fallback_line(
			result.outcome,
			name=child_name,
			correct_answer=checkpoint.correct_answer,
			theme_word=theme,
			meaning=checkpoint.meaning,
		)
	else:
		cache.set(key, reply)

	return CoachResponse(
		reply_text=reply,
		outcome=outcome,
		animation=animation_for(outcome),
		debug=CoachDebug(
			pause_id=pause_id,
			choice=choice,
			is_correct=result.is_correct,
			is_unsure=result.is_unsure,
			cached=False,
			fallback=used_fallback,
		),
	)
