"""
Pytest configuration and fixtures

Every test builds its own app through create_app() with test doubles for
the mail transport, the LLM coach and Stripe. Nothing touches the network.
"""
import os
import sys
from typing import List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import Settings
from core.security import create_access_token
from main import create_app
from schemas import SKILLS, AnalysisResult, SkillScore

TEST_JWT_SECRET = "test-secret-key-for-testing-at-least-32-chars"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        NODE_ENV="development",
        JWT_SECRET=TEST_JWT_SECRET,
        OPENROUTER_API_KEY="test-openrouter-key",
        FRONTEND_URL="http://localhost:5173",
        SMTP_USER="",
        SMTP_PASS="",
        UPLOADS_DIR=str(tmp_path / "uploads"),
        LOG_FORMAT="text",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def sample_analysis(score: int = 82) -> AnalysisResult:
    return AnalysisResult(
        score=score,
        insights=["Good footwork", "Stronger follow-through", "Keep head still", "Breathe out on impact"],
        skill_breakdown=[SkillScore(skill=name, value=80) for name in SKILLS],
    )


class FakeCoach:
    """Records calls; answers deterministically."""

    def __init__(self, analysis: Optional[AnalysisResult] = None, analyze_error: Optional[Exception] = None):
        self.chat_calls: List[tuple] = []
        self.analyze_calls: List[tuple] = []
        self.analysis = analysis or sample_analysis()
        self.analyze_error = analyze_error

    async def chat(self, message: str, history: Sequence[str] = ()) -> str:
        self.chat_calls.append((message, list(history)))
        return f"Coach says: {message}"

    async def analyze(self, sport: str, description: str) -> AnalysisResult:
        self.analyze_calls.append((sport, description))
        if self.analyze_error:
            raise self.analyze_error
        return self.analysis


class FakeEmailService:
    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[tuple] = []

    async def send_email_otp(self, email: str, otp: str) -> bool:
        self.sent.append((email, otp))
        return self.succeed

    async def verify_connection(self) -> bool:
        return True


class FakeStripeService:
    """Skips signature verification and keeps the exact payload it was handed."""

    def __init__(self, checkout_url: str = "https://checkout.stripe.test/session"):
        self.payloads: List[bytes] = []
        self.signatures: List[str] = []
        self.checkout_url = checkout_url

    def construct_event(self, *, payload: bytes, sig_header: str):
        self.payloads.append(payload)
        self.signatures.append(sig_header)
        return {
            "id": "evt_test_1",
            "type": "customer.subscription.updated",
            "data": {"object": {"id": "sub_1", "customer": "cus_1", "status": "active"}},
        }

    def create_checkout_session(self, *, email: str) -> str:
        return self.checkout_url


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def coach() -> FakeCoach:
    return FakeCoach()


@pytest.fixture
def email_service() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture
def stripe_service() -> FakeStripeService:
    return FakeStripeService()


@pytest.fixture
def app(settings, coach, email_service, stripe_service):
    return create_app(
        settings,
        coach=coach,
        email_service=email_service,
        stripe_service=stripe_service,
    )


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers() -> dict:
    token = create_access_token({"sub": "athlete@example.com"}, TEST_JWT_SECRET)
    return {"Authorization": f"Bearer {token}"}
