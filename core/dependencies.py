"""
FastAPI dependencies resolving the service objects built by create_app().

Everything lives on app.state so tests can inject doubles per app instance.
"""
from fastapi import Request

from core.config import Settings
from services.coaching import CoachingAssistant
from services.email_service import EmailService
from services.event_store import EventStore
from services.otp_service import OTPStore
from services.profile_store import ProfileStore
from services.stripe_service import StripeService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_coach(request: Request) -> CoachingAssistant:
    return request.app.state.coach


def get_stripe_service(request: Request) -> StripeService:
    return request.app.state.stripe_service


def get_otp_store(request: Request) -> OTPStore:
    return request.app.state.otp_store


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def get_event_store(request: Request) -> EventStore:
    return request.app.state.event_store
