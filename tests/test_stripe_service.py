import pytest

from conftest import make_settings
from services.stripe_service import StripeService, get_stripe_config, process_stripe_event


def _event(event_type, obj, event_id="evt_1"):
    return {"id": event_id, "type": event_type, "data": {"object": obj}}


class TestProcessStripeEvent:
    @pytest.mark.parametrize("status,tier", [("active", "premium"), ("trialing", "premium"), ("canceled", "free")])
    def test_subscription_status_maps_to_tier(self, status, tier):
        result = process_stripe_event(
            _event("customer.subscription.updated", {"id": "sub_1", "customer": "cus_1", "status": status})
        )
        assert result["processed"] is True
        assert result["tier"] == tier
        assert result["customer"] == "cus_1"

    def test_checkout_completed(self):
        result = process_stripe_event(
            _event("checkout.session.completed", {"customer": "cus_9", "subscription": "sub_9"})
        )
        assert result == {
            "processed": True,
            "event_id": "evt_1",
            "type": "checkout.session.completed",
            "customer": "cus_9",
            "subscription": "sub_9",
        }

    def test_unknown_type_acknowledged_but_ignored(self):
        result = process_stripe_event(_event("charge.refund.updated", {}))
        assert result == {"processed": False, "event_id": "evt_1", "type": "charge.refund.updated"}


class TestStripeConfig:
    def test_redirect_urls_default_to_frontend(self, tmp_path):
        cfg = get_stripe_config(make_settings(tmp_path, FRONTEND_URL="https://athleonglobal.in/"))
        assert cfg.checkout_success_url == "https://athleonglobal.in/payments?status=success"
        assert cfg.checkout_cancel_url == "https://athleonglobal.in/payments?status=cancel"

    def test_construct_event_fails_closed_without_secret(self, tmp_path):
        service = StripeService.from_settings(make_settings(tmp_path))
        with pytest.raises(RuntimeError, match="STRIPE_WEBHOOK_SECRET"):
            service.construct_event(payload=b"{}", sig_header="t=1,v1=abc")

    def test_construct_event_verifies_against_raw_bytes(self, tmp_path, monkeypatch):
        import stripe

        captured = {}

        def _construct(payload, sig_header, secret):
            captured.update(payload=payload, sig_header=sig_header, secret=secret)
            return {"id": "evt_2"}

        monkeypatch.setattr(stripe.Webhook, "construct_event", staticmethod(_construct))
        service = StripeService.from_settings(make_settings(tmp_path, STRIPE_WEBHOOK_SECRET="whsec_test"))

        assert service.construct_event(payload=b'{"a" : 1}', sig_header="sig") == {"id": "evt_2"}
        assert captured == {"payload": b'{"a" : 1}', "sig_header": "sig", "secret": "whsec_test"}

    def test_checkout_requires_price(self, tmp_path):
        service = StripeService.from_settings(make_settings(tmp_path, STRIPE_SECRET_KEY="sk_test_x"))
        with pytest.raises(RuntimeError, match="STRIPE_PRICE_ID"):
            service.create_checkout_session(email="runner@example.com")
