"""Tests for the kitchen consumption endpoint."""
import math
import uuid
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

URL = "/api/v1/food-supply/kitchen-consumption"


def recent(days=1):
    return datetime.utcnow() - timedelta(days=days)


@pytest.fixture
def manager(user_factory):
    return user_factory(email="manager@example.com", role="MANAGER")


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get(URL)
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized"

    def test_wrong_scheme(self, client, make_token, manager):
        response = client.get(URL, headers={"Authorization": f"Token {make_token(manager.id)}"})
        assert response.status_code == 401

    def test_expired_token(self, client, make_token, manager):
        token = make_token(manager.id, ttl_seconds=-60)
        response = client.get(URL, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_bad_signature(self, client, make_token, manager):
        token = make_token(manager.id, secret="a-different-secret-of-enough-length")
        response = client.get(URL, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_profile(self, client, make_token):
        token = make_token(uuid.uuid4())
        response = client.get(URL, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403

    def test_no_data_access_when_unauthenticated(self, client):
        with patch("app.api.consumption.build_consumption_report") as build:
            client.get(URL)
        build.assert_not_called()


class TestKitchenConsumption:
    def test_response_shape(self, client, auth_headers, manager, kitchen_factory):
        kitchen_factory(name="Main Kitchen")

        response = client.get(URL, headers=auth_headers(manager))
        assert response.status_code == 200
        data = response.json()

        assert set(data) == {"kitchens", "summary", "metadata"}
        assert set(data["metadata"]) == {"startDate", "endDate", "generatedAt"}
        kitchen = data["kitchens"][0]
        for key in (
            "totalConsumed", "totalWasted", "wastePercentage", "consumptionTrend",
            "mostConsumedItems", "mostWastedItems", "costData", "totalRecipeCost",
            "consumptionByDay", "consumptionByMonth",
        ):
            assert key in kitchen
        assert set(kitchen["costData"]) == {"totalCost", "wasteCost", "savingsOpportunity"}
        assert "periodComparison" in data["summary"]
        assert "private" in response.headers["cache-control"]

    def test_idle_kitchen_listed_with_zeros(self, client, auth_headers, manager, kitchen_factory):
        kitchen = kitchen_factory(name="Idle")

        data = client.get(URL, headers=auth_headers(manager)).json()

        assert len(data["kitchens"]) == 1
        entry = data["kitchens"][0]
        assert entry["id"] == str(kitchen.id)
        assert entry["totalConsumed"] == 0
        assert entry["totalWasted"] == 0
        assert entry["wastePercentage"] == 0
        assert entry["consumptionTrend"] == 0

    def test_each_kitchen_once(self, client, auth_headers, manager, kitchen_factory,
                               food_supply_factory, consumption_factory):
        a = kitchen_factory(name="A")
        b = kitchen_factory(name="B")
        rice = food_supply_factory(a)
        for _ in range(3):
            consumption_factory(a, rice, quantity=2, date=recent())

        data = client.get(URL, headers=auth_headers(manager)).json()
        ids = [k["id"] for k in data["kitchens"]]
        assert sorted(ids) == sorted([str(a.id), str(b.id)])

    def test_trend_when_previous_period_empty(self, client, auth_headers, manager,
                                              kitchen_factory, consumption_factory):
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=50, date=recent())

        data = client.get(URL, headers=auth_headers(manager)).json()
        assert data["kitchens"][0]["consumptionTrend"] == 100
        assert data["summary"]["periodComparison"]["percentageChange"] == 100

    def test_waste_percentage(self, client, auth_headers, manager, kitchen_factory,
                              consumption_factory, recipe_factory, recipe_usage_factory):
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=80, date=recent())
        recipe_usage_factory(kitchen, recipe_factory(), waste=20, created_at=recent())

        data = client.get(URL, headers=auth_headers(manager)).json()
        assert data["kitchens"][0]["wastePercentage"] == pytest.approx(20.0)
        assert data["summary"]["overallWastePercentage"] == pytest.approx(20.0)

    def test_top_waste_reasons(self, client, auth_headers, manager, kitchen_factory,
                               food_supply_factory, disposal_factory):
        kitchen = kitchen_factory()
        food_supply_factory(kitchen, name="Yogurt", quantity=75, price_per_unit=0.4,
                            expiration_date=recent(2))
        stew = food_supply_factory(kitchen, name="Stew", price_per_unit=0.4)
        disposal_factory(stew, quantity=25, reason="overproduction", kitchen=kitchen,
                         created_at=recent())

        reasons = client.get(URL, headers=auth_headers(manager)).json()["summary"]["topWasteReasons"]
        assert reasons[0]["reason"] == "expired"
        assert reasons[0]["percentage"] == pytest.approx(75.0)
        assert reasons[0]["cost"] == pytest.approx(30.0)
        assert reasons[1]["reason"] == "overproduction"

    def test_zero_activity_has_no_nan(self, client, auth_headers, manager, kitchen_factory):
        kitchen_factory()
        response = client.get(URL, headers=auth_headers(manager))

        assert "NaN" not in response.text
        assert "Infinity" not in response.text
        summary = response.json()["summary"]
        assert summary["overallWastePercentage"] == 0
        assert math.isfinite(summary["periodComparison"]["wastePercentageChange"])

    @pytest.mark.parametrize("days", ["0", "-7", "abc", ""])
    def test_invalid_days_fall_back_to_default(self, client, auth_headers, manager,
                                               kitchen_factory, days):
        kitchen_factory()
        data = client.get(URL, params={"days": days}, headers=auth_headers(manager)).json()

        start = datetime.fromisoformat(data["metadata"]["startDate"])
        end = datetime.fromisoformat(data["metadata"]["endDate"])
        assert end - start == timedelta(days=30)

    def test_days_parameter(self, client, auth_headers, manager, kitchen_factory,
                            consumption_factory):
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=5, date=recent(2))
        consumption_factory(kitchen, quantity=9, date=recent(20))

        data = client.get(URL, params={"days": "7"}, headers=auth_headers(manager)).json()
        assert data["kitchens"][0]["totalConsumed"] == 5
        assert len(data["kitchens"][0]["consumptionByDay"]) == 8

    def test_breakdowns_optional(self, client, auth_headers, manager, kitchen_factory):
        kitchen_factory()
        data = client.get(
            URL, params={"include_breakdowns": "false"}, headers=auth_headers(manager)
        ).json()
        assert data["kitchens"][0]["consumptionByDay"] == []

    def test_top_n_validated(self, client, auth_headers, manager):
        response = client.get(URL, params={"top_n": 0}, headers=auth_headers(manager))
        assert response.status_code == 422

    def test_staff_only_sees_own_records(self, client, auth_headers, user_factory,
                                         kitchen_factory, consumption_factory):
        staff = user_factory(email="cook@example.com")
        other = user_factory(email="other@example.com")
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=3, date=recent(), user_id=staff.id)
        consumption_factory(kitchen, quantity=40, date=recent(), user_id=other.id)

        data = client.get(URL, headers=auth_headers(staff)).json()
        assert data["summary"]["totalConsumed"] == 3

    def test_page_access_grants_full_view(self, client, auth_headers, user_factory,
                                          kitchen_factory, consumption_factory):
        staff = user_factory(email="cook@example.com", page_access={"/food-supply": True})
        other = user_factory(email="other@example.com")
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=3, date=recent(), user_id=staff.id)
        consumption_factory(kitchen, quantity=40, date=recent(), user_id=other.id)

        data = client.get(URL, headers=auth_headers(staff)).json()
        assert data["summary"]["totalConsumed"] == 43

    def test_idempotent_figures(self, client, auth_headers, manager, kitchen_factory,
                                consumption_factory, recipe_usage_factory):
        kitchen = kitchen_factory()
        consumption_factory(kitchen, quantity=0.1, date=recent())
        consumption_factory(kitchen, quantity=0.2, date=recent())
        recipe_usage_factory(kitchen, waste=0.3, cost=1.7, created_at=recent())

        first = client.get(URL, headers=auth_headers(manager)).json()
        second = client.get(URL, headers=auth_headers(manager)).json()
        assert first["summary"] == second["summary"]

    def test_store_failure_returns_generic_error(self, client, auth_headers, manager):
        with patch(
            "app.api.consumption.build_consumption_report",
            side_effect=OperationalError("SELECT 1", {}, Exception("connection lost")),
        ):
            response = client.get(URL, headers=auth_headers(manager))

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to load kitchen consumption data"

    @pytest.mark.parametrize("days", ["1000000", "999999999999"])
    def test_oversized_days_capped(self, client, auth_headers, manager, kitchen_factory, days):
        kitchen_factory()
        response = client.get(
            URL,
            params={"days": days, "include_breakdowns": "false"},
            headers=auth_headers(manager),
        )
        assert response.status_code == 200

        metadata = response.json()["metadata"]
        start = datetime.fromisoformat(metadata["startDate"])
        end = datetime.fromisoformat(metadata["endDate"])
        assert end - start == timedelta(days=1095)

    def test_user_without_organization_rejected(self, client, auth_headers, user_factory,
                                                kitchen_factory, consumption_factory):
        orphan = user_factory(email="orphan@example.com", role="MANAGER", organization_id=None)
        other = user_factory(email="other@example.com", organization_id=None)
        kitchen = kitchen_factory(name="Unassigned", organization_id=None)
        consumption_factory(kitchen, quantity=12, date=recent(), user_id=other.id)

        with patch("app.api.consumption.build_consumption_report") as build:
            response = client.get(URL, headers=auth_headers(orphan))

        assert response.status_code == 403
        build.assert_not_called()
