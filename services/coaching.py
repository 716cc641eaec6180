"""
Coaching capability shared by both AI variants.

OpenRouterCoach (services/openrouter_coach.py) calls the chat-completion API
directly and backs the gateway's /api/ai routes. ProxyCoach
(clients/proxy_coach.py) is the client-side variant that goes through the
gateway instead. Both satisfy CoachingAssistant.
"""
from __future__ import annotations

import json
import random
from typing import Any, Dict, Protocol, Sequence

from schemas import FULL_MARK, SKILLS, AnalysisResult, SkillScore


class CoachingAssistant(Protocol):
    async def chat(self, message: str, history: Sequence[str] = ()) -> str:
        ...

    async def analyze(self, sport: str, description: str) -> AnalysisResult:
        ...


# Inclusive bands for the randomized fallback, keyed by skill.
FALLBACK_SKILL_BANDS: Dict[str, tuple[int, int]] = {
    "Technique": (65, 90),
    "Power": (60, 85),
    "Speed": (60, 85),
    "Accuracy": (65, 90),
    "Consistency": (60, 85),
}
FALLBACK_SCORE_RANGE = (70, 89)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the first JSON object from free-form model output.

    Takes the span from the first "{" to the last "}" so prose around the
    object is ignored.
    """
    if not text:
        raise ValueError("Empty model response")

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in model response")

    parsed = json.loads(text[start : end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Model response JSON is not an object")
    return parsed


def fixed_fallback_analysis() -> AnalysisResult:
    """Deterministic stand-in shown when the analysis server is unreachable."""
    return AnalysisResult(
        score=75,
        insights=[
            "Could not connect to analysis server",
            "Showing estimated metrics based on your request",
            "Please check your internet connection and try again",
        ],
        skill_breakdown=[SkillScore(skill=name, value=70, full_mark=FULL_MARK) for name in SKILLS],
    )


def random_fallback_analysis(sport: str, rng: random.Random | None = None) -> AnalysisResult:
    """
    Plausible-looking analysis used when the model reply is unusable.

    Values are random within FALLBACK_SCORE_RANGE / FALLBACK_SKILL_BANDS.
    """
    rng = rng or random.Random()
    sport_name = sport.strip() or "your sport"
    return AnalysisResult(
        score=rng.randint(*FALLBACK_SCORE_RANGE),
        insights=[
            f"Solid foundation in core {sport_name} mechanics",
            "Work on explosive power through plyometric drills",
            "Focus on consistency by repeating key movements under fatigue",
            "Record more sessions to track improvement over time",
        ],
        skill_breakdown=[
            SkillScore(skill=name, value=rng.randint(*FALLBACK_SKILL_BANDS[name]), full_mark=FULL_MARK)
            for name in SKILLS
        ],
    )
