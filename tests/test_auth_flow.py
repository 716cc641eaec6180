"""
Passwordless sign-in: send OTP by email, verify it, use the token.
"""
from fastapi.testclient import TestClient

from conftest import FakeEmailService
from main import create_app


def _sign_in(client, email_service, email="Runner@Example.com"):
    response = client.post("/api/auth/send-otp", json={"email": email})
    assert response.status_code == 200
    _, otp = email_service.sent[-1]
    response = client.post("/api/auth/verify-otp", json={"email": email, "otp": otp})
    assert response.status_code == 200
    return response.json()


class TestOTPFlow:
    def test_send_otp_emails_a_six_digit_code(self, client, email_service):
        response = client.post("/api/auth/send-otp", json={"email": "runner@example.com"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        email, otp = email_service.sent[0]
        assert email == "runner@example.com"
        assert len(otp) == 6 and otp.isdigit()

    def test_verified_code_yields_working_token(self, client, email_service):
        body = _sign_in(client, email_service)
        assert body["user"] == {"email": "runner@example.com"}

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json() == {"email": "runner@example.com"}

    def test_code_is_single_use(self, client, email_service):
        client.post("/api/auth/send-otp", json={"email": "runner@example.com"})
        _, otp = email_service.sent[-1]

        first = client.post("/api/auth/verify-otp", json={"email": "runner@example.com", "otp": otp})
        second = client.post("/api/auth/verify-otp", json={"email": "runner@example.com", "otp": otp})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["message"] == "Invalid or expired verification code"

    def test_wrong_code_rejected(self, client, email_service):
        client.post("/api/auth/send-otp", json={"email": "runner@example.com"})
        _, otp = email_service.sent[-1]
        wrong = "000000" if otp != "000000" else "111111"

        response = client.post("/api/auth/verify-otp", json={"email": "runner@example.com", "otp": wrong})
        assert response.status_code == 400
        assert response.json()["error"] == "Bad Request"

    def test_undelivered_code_returns_502_and_is_discarded(self, settings):
        email_service = FakeEmailService(succeed=False)
        client = TestClient(create_app(settings, email_service=email_service))

        response = client.post("/api/auth/send-otp", json={"email": "runner@example.com"})
        assert response.status_code == 502
        assert response.json()["error"] == "Bad Gateway"

        _, otp = email_service.sent[0]
        verify = client.post("/api/auth/verify-otp", json={"email": "runner@example.com", "otp": otp})
        assert verify.status_code == 400

    def test_invalid_email_is_a_validation_error(self, client, email_service):
        response = client.post("/api/auth/send-otp", json={"email": "not-an-email"})
        assert response.status_code == 422
        assert email_service.sent == []


class TestTokenChecks:
    def test_me_without_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "message": "Not authenticated"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_with_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid authentication credentials"
