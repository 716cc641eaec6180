"""
AI Coach API Router

Chat and text-based performance analysis for authenticated athletes.
"""
import logging

from fastapi import APIRouter, Depends

from core.auth import get_current_user
from core.dependencies import get_coach
from core.exceptions import CoachNotConfiguredError, ServiceUnavailableError
from schemas import AnalysisRequest, AnalysisResult, ChatRequest, ChatResponse, UserIdentity
from services.coaching import CoachingAssistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI Coach"])


@router.post("/chat", response_model=ChatResponse)
async def chat_with_coach(
    request: ChatRequest,
    user: UserIdentity = Depends(get_current_user),
    coach: CoachingAssistant = Depends(get_coach),
):
    """Send a message to the AI coach and get a reply."""
    reply = await coach.chat(request.message, request.history)
    return ChatResponse(message=reply)


@router.post(
    "/analyze-text",
    response_model=AnalysisResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def analyze_text(
    request: AnalysisRequest,
    user: UserIdentity = Depends(get_current_user),
    coach: CoachingAssistant = Depends(get_coach),
):
    """Score a written description of a performance."""
    try:
        return await coach.analyze(request.sport, request.description)
    except CoachNotConfiguredError as e:
        logger.error(f"Analysis requested by {user.email} but coach is not configured: {e}")
        raise ServiceUnavailableError("AI analysis is not available right now")
