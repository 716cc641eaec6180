"""
AI Coach over a chat-completion API (OpenRouter, OpenAI-compatible).

Design goals:
- Chat never raises: an offline-coach message replaces any failure
- Analysis always returns a well-formed AnalysisResult once a key is configured
- No key means chat answers in offline mode, analysis raises

Known limitation: prior turns arrive as plain strings and are flattened into a
single system message, so the model loses who said what.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings
from core.exceptions import CoachNotConfiguredError, CoachUpstreamError
from schemas import SKILLS, AnalysisResult, ChatMessage
from services.coaching import extract_json_object, random_fallback_analysis

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are Athleon AI, an expert sports coach and performance analyst for the "
    "Athleon Global sports network. You help athletes of every level with training "
    "plans, technique, conditioning, recovery, nutrition basics, mental preparation "
    "and competition strategy. Keep answers practical, encouraging and concise. "
    "Stay within sports and athletic performance; politely decline unrelated "
    "requests. Recommend seeing a medical professional for injuries or pain."
)

HISTORY_PREFIX = "Previous conversation context:\n"

OFFLINE_MODE_MESSAGE = (
    "AI coaching is in offline mode right now because no API key is configured. "
    "Please try again later."
)

OFFLINE_COACH_MESSAGE = (
    "I'm having trouble reaching my coaching brain right now, but here's some "
    "general advice: warm up properly before every session, focus on consistent "
    "technique over intensity, get enough sleep, stay hydrated, and schedule rest "
    "days so your body can recover. Ask me again in a moment!"
)

CHAT_TEMPERATURE = 0.7
ANALYSIS_TEMPERATURE = 0.3


def build_chat_messages(message: str, history: Sequence[str] = ()) -> List[Dict[str, str]]:
    """System prompt, optional flattened history block, then the user turn."""
    messages = [ChatMessage(role="system", content=SYSTEM_PROMPT)]
    if history:
        messages.append(ChatMessage(role="system", content=HISTORY_PREFIX + "\n".join(history)))
    messages.append(ChatMessage(role="user", content=message))
    return [m.model_dump() for m in messages]


def build_analysis_prompt(sport: str, description: str) -> str:
    skills = ",\n    ".join(f'{{"skill": "{name}", "value": <0-100>, "fullMark": 100}}' for name in SKILLS)
    return f"""Analyze this {sport} performance based on the athlete's description.

Description: {description}

Respond with ONLY a JSON object in exactly this format:
{{
  "score": <overall score 0-100>,
  "insights": ["<insight 1>", "<insight 2>", "<insight 3>", "<insight 4>"],
  "skillBreakdown": [
    {skills}
  ]
}}

Rules:
- Give 4 or 5 short, specific, actionable insights.
- Keep the skills in exactly this order: {", ".join(SKILLS)}.
- Every value is an integer between 0 and 100."""


class OpenRouterCoach:
    """Chat and performance analysis backed by a chat-completion API."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        referer: Optional[str] = None,
        client: Any = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.referer = referer
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenRouterCoach":
        return cls(
            settings.OPENROUTER_API_KEY,
            model=settings.OPENROUTER_MODEL,
            base_url=settings.OPENROUTER_BASE_URL,
            timeout=float(settings.EXTERNAL_API_TIMEOUT),
            referer=settings.FRONTEND_URL,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> Any:
        if self._client is None:
            headers = {"X-Title": "Athleon Global"}
            if self.referer:
                headers["HTTP-Referer"] = self.referer
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers=headers,
            )
        return self._client

    async def _complete(self, messages: List[Dict[str, str]], temperature: float) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
        )
        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            upstream = getattr(response, "error", None)
            if isinstance(upstream, dict) and upstream.get("message"):
                raise CoachUpstreamError(upstream["message"])
            raise CoachUpstreamError("No response content from model")
        return content.strip()

    async def chat(self, message: str, history: Sequence[str] = ()) -> str:
        if not self.is_configured:
            logger.warning("OPENROUTER_API_KEY not configured, chat running in offline mode")
            return OFFLINE_MODE_MESSAGE

        try:
            return await self._complete(build_chat_messages(message, history), CHAT_TEMPERATURE)
        except Exception as e:
            logger.error(f"AI chat failed: {e}")
            return OFFLINE_COACH_MESSAGE

    async def analyze(self, sport: str, description: str) -> AnalysisResult:
        if not self.is_configured:
            raise CoachNotConfiguredError("OPENROUTER_API_KEY not configured")

        prompt = build_analysis_prompt(sport, description)
        try:
            content = await self._complete([{"role": "user", "content": prompt}], ANALYSIS_TEMPERATURE)
            return AnalysisResult.model_validate(extract_json_object(content))
        except (ValueError, PydanticValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"AI analysis reply unusable, using fallback: {e}")
        except Exception as e:
            logger.error(f"AI analysis failed, using fallback: {e}")
        return random_fallback_analysis(sport)

    analyze_description = analyze
