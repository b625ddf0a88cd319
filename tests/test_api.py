"""
Tests for the FastAPI server.

Round timing runs on the FakeClock from conftest, so countdowns and
round ends are stepped explicitly.
"""

import pytest


VALID_CARD = {
    "holder": "Giulia Rossi",
    "cardNumber": "4242 4242 4242 4242",
    "expiry": "12/39",
    "cvc": "123",
}


def _open_session(client, client_id="browser-1"):
    response = client.post("/api/play/sessions", json={"clientId": client_id})
    assert response.status_code == 201
    return response.json()["sessionId"]


def _start_round(client, fake_clock, client_id="browser-1", tier_id="t30"):
    """Open a session, buy the ticket and wait out the countdown."""
    session_id = _open_session(client, client_id)
    base = f"/api/play/sessions/{session_id}"

    stage = client.post(f"{base}/tier", json={"tierId": tier_id}).json()["stage"]
    if stage == "checkout":
        client.post(f"{base}/checkout", json=VALID_CARD)

    fake_clock.advance(3)
    round_state = client.get(base).json()
    assert round_state["stage"] == "playing"
    return base, round_state


class TestHealthEndpoint:
    """Tests for health endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_detailed_health(self, client):
        data = client.get("/health/detailed").json()

        assert data["checks"]["catalog"]["products"] == 100
        assert data["checks"]["settings"]["tiers"] == ["t30", "t50"]

    def test_probes(self, client):
        assert client.get("/ready").json() == {"status": "ready"}
        assert client.get("/live").json() == {"status": "alive"}


class TestSettingsEndpoint:
    """Tests for /api/settings."""

    def test_get_defaults(self, client):
        data = client.get("/api/settings").json()

        assert [t["id"] for t in data["tiers"]] == ["t30", "t50"]
        assert [s["id"] for s in data["sectorsByTier"]["t30"]] == ["eyes", "lips", "skin"]

    def test_post_then_get_roundtrip(self, client, settings_dict):
        settings_dict["tiers"][1]["secs"] = 150
        settings_dict["sectorsByTier"]["t50"][2]["weight"] = 70

        response = client.post("/api/settings", json=settings_dict)
        assert response.status_code == 200
        assert response.json() == {"ok": True}

        data = client.get("/api/settings").json()
        assert data["tiers"][1]["secs"] == 150
        assert data["sectorsByTier"]["t50"][2]["weight"] == 70

    def test_invalid_post_keeps_previous(self, client):
        before = client.get("/api/settings").json()

        response = client.post("/api/settings", json={"tiers": "nope"})

        assert response.status_code == 422
        assert client.get("/api/settings").json() == before

    def test_post_without_tiers_keeps_previous(self, client, settings_dict):
        settings_dict["tiers"][0]["secs"] = 33
        client.post("/api/settings", json=settings_dict)
        before = client.get("/api/settings").json()

        response = client.post(
            "/api/settings",
            json={"sectorsByTier": settings_dict["sectorsByTier"]},
        )

        assert response.status_code == 422
        after = client.get("/api/settings").json()
        assert after == before
        assert after["tiers"][0]["secs"] == 33

    def test_new_settings_apply_to_next_tier_pick(self, client, settings_dict):
        settings_dict["tiers"][0]["secs"] = 20
        client.post("/api/settings", json=settings_dict)

        session_id = _open_session(client)
        data = client.post(
            f"/api/play/sessions/{session_id}/tier", json={"tierId": "t30"}
        ).json()

        assert data["tier"]["secs"] == 20


class TestShopEndpoints:
    """Tests for /api/shopify."""

    def test_list_products(self, client):
        products = client.get("/api/shopify/products").json()["products"]

        assert len(products) == 100
        first = products[0]
        assert first["id"] == "eyes-001"
        assert first["images"][0]["url"]
        assert first["variants"][0]["price"]["currencyCode"] == "EUR"

    def test_filter_products_by_sector(self, client):
        response = client.post(
            "/api/shopify/products",
            json={"sectors": [{"id": "lips"}, {"id": "skin"}, {"id": "nails"}]},
        )
        products = response.json()["products"]

        assert len(products) == 62
        assert {p["sector"] for p in products} == {"lips", "skin"}

    @pytest.mark.parametrize("kwargs", [
        {},
        {"content": b"not json", "headers": {"Content-Type": "application/json"}},
        {"json": {"sectors": "eyes"}},
        {"json": {"sectors": []}},
        {"json": ["eyes"]},
    ])
    def test_filter_falls_back_to_everything(self, client, kwargs):
        response = client.post("/api/shopify/products", **kwargs)

        assert response.status_code == 200
        assert len(response.json()["products"]) == 100

    def test_checkout_returns_web_url(self, client):
        response = client.post(
            "/api/shopify/checkout",
            json={"variantIds": ["gid://shopify/ProductVariant/eyes-001"]},
        )

        assert response.status_code == 200
        assert "items=eyes-001" in response.json()["webUrl"]

    def test_checkout_errors(self, client):
        empty = client.post("/api/shopify/checkout", json={"variantIds": []})
        unknown = client.post("/api/shopify/checkout", json={"variantIds": ["bogus"]})

        assert empty.status_code == 400
        assert unknown.status_code == 404

    def test_verify_pass(self, client):
        assert client.get("/api/shopify/verify-pass").json() == {"ok": True}


class TestTicketFlow:
    """Session creation, tier pick and ticket payment."""

    def test_new_session_starts_at_ticket_selection(self, client):
        response = client.post("/api/play/sessions", json={"clientId": "browser-1"})
        data = response.json()

        assert response.status_code == 201
        assert data["round"]["stage"] == "ticket-selection"
        assert [t["id"] for t in data["tiers"]] == ["t30", "t50"]

    def test_missing_client_id_rejected(self, client):
        response = client.post("/api/play/sessions", json={})
        assert response.status_code == 422

    def test_unknown_tier(self, client):
        session_id = _open_session(client)
        response = client.post(f"/api/play/sessions/{session_id}/tier", json={"tierId": "gold"})

        assert response.status_code == 404

    def test_declined_card_stays_in_checkout(self, client):
        session_id = _open_session(client)
        base = f"/api/play/sessions/{session_id}"
        client.post(f"{base}/tier", json={"tierId": "t30"})

        declined = dict(VALID_CARD, cardNumber="4000000000000002")
        response = client.post(f"{base}/checkout", json=declined)

        assert response.status_code == 402
        assert client.get(base).json()["stage"] == "checkout"

    def test_malformed_card_rejected(self, client):
        session_id = _open_session(client)
        base = f"/api/play/sessions/{session_id}"
        client.post(f"{base}/tier", json={"tierId": "t30"})

        response = client.post(f"{base}/checkout", json=dict(VALID_CARD, cvc="1"))
        assert response.status_code == 422

    def test_payment_starts_countdown(self, client, fake_clock):
        session_id = _open_session(client)
        base = f"/api/play/sessions/{session_id}"
        client.post(f"{base}/tier", json={"tierId": "t30"})

        data = client.post(f"{base}/checkout", json=VALID_CARD).json()

        assert data["paymentRef"].startswith("pay_")
        assert data["round"]["stage"] == "countdown"
        assert data["round"]["countdownRemaining"] == 3
        assert data["round"]["paidTiers"] == ["t30"]

    def test_checkout_outside_checkout_stage(self, client):
        session_id = _open_session(client)
        response = client.post(f"/api/play/sessions/{session_id}/checkout", json=VALID_CARD)

        assert response.status_code == 409

    def test_paid_ticket_skips_checkout_in_new_tab(self, client, fake_clock):
        _start_round(client, fake_clock, client_id="browser-7")

        session_id = _open_session(client, client_id="browser-7")
        data = client.post(
            f"/api/play/sessions/{session_id}/tier", json={"tierId": "t30"}
        ).json()

        assert data["stage"] == "countdown"

    def test_tickets_are_per_client(self, client, fake_clock):
        _start_round(client, fake_clock, client_id="browser-7")

        session_id = _open_session(client, client_id="browser-8")
        data = client.post(
            f"/api/play/sessions/{session_id}/tier", json={"tierId": "t30"}
        ).json()

        assert data["stage"] == "checkout"


class TestRoundFlow:
    """Swiping through a round and the summary actions."""

    def test_keep_reject_finish_and_checkout(self, client, fake_clock):
        base, state = _start_round(client, fake_clock)
        first_id = state["current"]["id"]

        kept = client.post(f"{base}/swipe", json={"action": "keep", "productId": first_id}).json()
        assert kept["applied"] == "keep"
        assert kept["round"]["shownCount"] == 1
        assert [p["id"] for p in kept["round"]["kept"]] == [first_id]

        fake_clock.advance(1.2)
        second_id = kept["round"]["current"]["id"]
        rejected = client.post(f"{base}/swipe", json={"action": "reject", "productId": second_id})
        assert rejected.json()["applied"] == "reject"

        summary = client.post(f"{base}/finish").json()
        assert summary["stage"] == "summary"
        assert summary["finishReason"] == "manual"
        assert [p["id"] for p in summary["kept"]] == [first_id]

        web_url = client.post(f"{base}/cart-checkout").json()["webUrl"]
        assert f"items={first_id}" in web_url

    def test_swipe_during_cooldown_is_throttled(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        client.post(f"{base}/swipe", json={"action": "keep"})

        response = client.post(f"{base}/swipe", json={"action": "keep"})

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "2"

    def test_stale_product_conflict(self, client, fake_clock):
        base, state = _start_round(client, fake_clock)
        first_id = state["current"]["id"]
        client.post(f"{base}/swipe", json={"action": "reject", "productId": first_id})
        fake_clock.advance(1)

        response = client.post(f"{base}/swipe", json={"action": "keep", "productId": first_id})

        assert response.status_code == 409

    def test_invalid_action_rejected(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        response = client.post(f"{base}/swipe", json={"action": "maybe"})

        assert response.status_code == 422

    def test_timer_ends_round(self, client, fake_clock):
        base, state = _start_round(client, fake_clock)
        assert state["remainingSeconds"] == 90

        fake_clock.advance(90)
        data = client.get(base).json()

        assert data["stage"] == "summary"
        assert data["finishReason"] == "timeout"
        assert data["remainingSeconds"] == 0

        response = client.post(f"{base}/swipe", json={"action": "keep"})
        assert response.status_code == 409

    def test_cart_checkout_needs_finished_round(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)

        assert client.post(f"{base}/cart-checkout").status_code == 409

    def test_cart_checkout_with_nothing_kept(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        client.post(f"{base}/finish")

        assert client.post(f"{base}/cart-checkout").status_code == 400

    def test_replay_until_exhausted(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        client.post(f"{base}/finish")

        for replays_left in (1, 0):
            data = client.post(f"{base}/replay").json()
            assert data["stage"] == "playing"
            assert data["replaysLeft"] == replays_left
            assert data["kept"] == []
            client.post(f"{base}/finish")

        assert client.post(f"{base}/replay").status_code == 409
        assert client.get(base).json()["roundsFinished"] == 3

    def test_retry_without_error_conflicts(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        client.post(f"{base}/finish")

        assert client.post(f"{base}/retry").status_code == 409

    def test_address_capture(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)
        address = {
            "fullName": "Giulia Rossi",
            "street": "Via Roma 1",
            "city": "Milano",
            "postalCode": "20100",
        }

        assert client.post(f"{base}/address", json=address).status_code == 409

        client.post(f"{base}/finish")
        data = client.post(f"{base}/address", json=address).json()

        assert data["stage"] == "address"
        assert data["address"]["city"] == "Milano"
        assert data["address"]["country"] == "IT"


class TestSessionLifecycle:
    """Session lookup and teardown."""

    def test_unknown_session(self, client):
        assert client.get("/api/play/sessions/missing").status_code == 404
        assert client.post("/api/play/sessions/missing/finish").status_code == 404
        assert client.delete("/api/play/sessions/missing").status_code == 404

    def test_close_session(self, client, fake_clock):
        base, _ = _start_round(client, fake_clock)

        assert client.delete(base).json() == {"ok": True}
        assert client.get(base).status_code == 404

    def test_sessions_are_isolated(self, client, fake_clock):
        base_a, _ = _start_round(client, fake_clock, client_id="browser-1")
        base_b, _ = _start_round(client, fake_clock, client_id="browser-2")

        client.post(f"{base_a}/finish")

        assert client.get(base_a).json()["stage"] == "summary"
        assert client.get(base_b).json()["stage"] == "playing"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
