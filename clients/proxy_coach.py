"""
AI coach that goes through the Athleon backend instead of calling the model.

The backend owns the model key and the athlete's context, so this variant
only forwards the current message. Chat degrades to fixed text on any
failure; analysis requires a token and otherwise degrades to a fixed
synthetic result.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from clients.api_client import ApiClient
from core.exceptions import AuthenticationRequiredError
from schemas import AnalysisResult
from services.coaching import fixed_fallback_analysis

logger = logging.getLogger(__name__)

CHAT_ENDPOINT = "/api/ai/chat"
ANALYZE_ENDPOINT = "/api/ai/analyze-text"

NOT_LOGGED_IN_MESSAGE = "I can't connect to my brain right now. Please log in again."
EMPTY_REPLY_MESSAGE = "I'm having trouble thinking right now."
OFFLINE_MESSAGE = (
    "I'm currently offline or having trouble connecting to the server. Please try again later."
)

TokenProvider = Callable[[], Optional[str]]


class ProxyCoach:
    def __init__(self, api_client: ApiClient, token_provider: TokenProvider):
        self.api = api_client
        self.token_provider = token_provider

    @staticmethod
    def _error_detail(response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return body.get("error") or body.get("message") or f"Server error: {response.status_code}"

    async def chat(self, message: str, history: Sequence[str] = ()) -> str:
        """
        Ask the backend coach. `history` is accepted for interface parity;
        the backend keeps its own context.
        """
        token = self.token_provider()
        if not token:
            logger.warning("No auth token found for AI chat")
            return NOT_LOGGED_IN_MESSAGE

        try:
            response = await self.api.post(CHAT_ENDPOINT, {"message": message}, token)
            if not response.is_success:
                raise RuntimeError(self._error_detail(response))
            return response.json().get("message") or EMPTY_REPLY_MESSAGE
        except Exception as e:
            logger.error(f"AI chat error: {e}")
            return OFFLINE_MESSAGE

    async def analyze(self, sport: str, description: str) -> AnalysisResult:
        token = self.token_provider()
        if not token:
            raise AuthenticationRequiredError("You must be logged in to analyze performance")

        try:
            response = await self.api.post(
                ANALYZE_ENDPOINT,
                {"sport": sport, "description": description},
                token,
            )
            if not response.is_success:
                raise RuntimeError(self._error_detail(response))
            return AnalysisResult.model_validate(response.json())
        except Exception as e:
            logger.error(f"AI analysis error: {e}")
            return fixed_fallback_analysis()
