"""Dr. Coli character pack: catchphrases, theme words and sprite states."""

from __future__ import annotations
from typing import Dict

# Every coach reply ends with this phrase
CLOSING_PHRASE = "Let’s keep going!"

THEME_WORDS: Dict[str, str] = {
	"puppies": "Puppy power!",
	"dinos": "Dino power!",
	"planes": "Pilot power!",
}

# Outcome -> sprite state for Coli and his friend Bori
ANIMATION_POLICY: Dict[str, Dict[str, str]] = {
	"teach": {"coli": "talk", "bori": "look"},
	"prompt": {"coli": "talk", "bori": "idle"},
	"correct": {"coli": "wave", "bori": "wave"},
	"wrong": {"coli": "talk", "bori": "look"},
	"unsure": {"coli": "talk", "bori": "idle"},
	"respect": {"coli": "bow", "bori": "bow"},
	"idle": {"coli": "idle", "bori": "idle"},
}


def theme_word(interest: str | None) -> str:
	return THEME_WORDS.get((interest or "").strip().lower(), "")


def animation_for(event: str) -> Dict[str, str]:
	return dict(ANIMATION_POLICY.get(event, ANIMATION_POLICY["idle"]))
