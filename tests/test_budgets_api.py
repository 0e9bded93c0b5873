"""
Tests for budget endpoints.
"""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi import status

from household_budget.domain.transaction import TransactionType
from household_budget.models import TransactionModel
from household_budget.utils.dates import utcnow


def budget_payload(name="Groceries", amount="1000", category_id=None, start_offset=-10, end_offset=20):
    now = utcnow()
    return {
        "name": name,
        "amount": amount,
        "period": "monthly",
        "category_id": str(category_id) if category_id else None,
        "start_date": (now + timedelta(days=start_offset)).isoformat(),
        "end_date": (now + timedelta(days=end_offset)).isoformat(),
    }


async def add_expense(db_session, amount, category_id):
    db_session.add(
        TransactionModel(
            amount=Decimal(amount),
            transaction_date=utcnow() - timedelta(days=1),
            category_id=category_id,
            transaction_type=TransactionType.EXPENSE,
        )
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_create_budget(async_client):
    """Test creating a budget."""
    category = uuid4()
    response = await async_client.post("/api/budgets/", json=budget_payload(category_id=category))

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "Groceries"
    assert Decimal(data["amount"]) == Decimal("1000")
    assert Decimal(data["spent"]) == Decimal("0")
    assert Decimal(data["remaining_amount"]) == Decimal("1000")
    assert data["category_id"] == str(category)
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_create_budget_invalid_amount(async_client):
    response = await async_client.post("/api/budgets/", json=budget_payload(amount="0"))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "amount_invalid"


@pytest.mark.asyncio
async def test_create_budget_invalid_period(async_client):
    response = await async_client.post(
        "/api/budgets/", json=budget_payload(start_offset=5, end_offset=-5)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "period_invalid"


@pytest.mark.asyncio
async def test_create_budget_overlap(async_client):
    category = uuid4()
    await async_client.post("/api/budgets/", json=budget_payload(category_id=category))

    response = await async_client.post(
        "/api/budgets/", json=budget_payload(name="Again", category_id=category)
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["kind"] == "overlap_exists"


@pytest.mark.asyncio
async def test_create_budget_short_name(async_client):
    response = await async_client.post("/api/budgets/", json=budget_payload(name="G"))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_get_budget_not_found(async_client):
    response = await async_client.get(f"/api/budgets/{uuid4()}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["kind"] == "not_found"


@pytest.mark.asyncio
async def test_budget_status(async_client, db_session):
    category = uuid4()
    created = await async_client.post("/api/budgets/", json=budget_payload(category_id=category))
    budget_id = created.json()["id"]
    await add_expense(db_session, "300", category)
    await add_expense(db_session, "250", category)

    response = await async_client.get(f"/api/budgets/{budget_id}/status")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert Decimal(data["spent_amount"]) == Decimal("550")
    assert Decimal(data["remaining_amount"]) == Decimal("450")
    assert data["utilization_percent"] == pytest.approx(55.0)
    assert data["status"] == "healthy"
    assert data["days_total"] == 30


@pytest.mark.asyncio
async def test_budget_utilization(async_client, db_session):
    category = uuid4()
    created = await async_client.post("/api/budgets/", json=budget_payload(category_id=category))
    await add_expense(db_session, "950", category)

    response = await async_client.get(f"/api/budgets/{created.json()['id']}/utilization")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["period"] == "monthly"
    assert data["recommendations"][0].startswith("Critical budget level reached")


@pytest.mark.asyncio
async def test_update_and_delete_budget(async_client):
    created = await async_client.post("/api/budgets/", json=budget_payload())
    budget_id = created.json()["id"]

    response = await async_client.put(
        f"/api/budgets/{budget_id}", json={"name": "Household", "amount": "1500"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Household"
    assert Decimal(response.json()["amount"]) == Decimal("1500")

    response = await async_client.delete(f"/api/budgets/{budget_id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await async_client.get(f"/api/budgets/{budget_id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_budget_below_spent(async_client, db_session):
    category = uuid4()
    created = await async_client.post("/api/budgets/", json=budget_payload(category_id=category))
    await add_expense(db_session, "500", category)

    response = await async_client.put(f"/api/budgets/{created.json()['id']}", json={"amount": "400"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "already_exceeded"


@pytest.mark.asyncio
async def test_list_budgets_with_filters(async_client):
    food = uuid4()
    await async_client.post("/api/budgets/", json=budget_payload(name="Food", amount="300", category_id=food))
    await async_client.post("/api/budgets/", json=budget_payload(name="Rent", amount="1200", category_id=uuid4()))

    response = await async_client.get("/api/budgets/", params={"category_id": str(food)})
    assert response.status_code == status.HTTP_200_OK
    assert [b["name"] for b in response.json()] == ["Food"]

    response = await async_client.get("/api/budgets/", params={"sort_by": "amount", "sort_order": "asc"})
    assert [b["name"] for b in response.json()] == ["Food", "Rent"]

    response = await async_client.get("/api/budgets/", params={"offset": 5})
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_budgets_rejects_bad_filters(async_client):
    response = await async_client.get("/api/budgets/", params={"amount_from": 10, "amount_to": 5})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = await async_client.get("/api/budgets/", params={"limit": 500})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_active_budgets_and_category_listing(async_client):
    category = uuid4()
    await async_client.post("/api/budgets/", json=budget_payload(name="Current", category_id=category))
    await async_client.post(
        "/api/budgets/",
        json=budget_payload(name="Later", category_id=uuid4(), start_offset=40, end_offset=70),
    )

    response = await async_client.get("/api/budgets/active")
    assert [b["name"] for b in response.json()] == ["Current"]

    response = await async_client.get(f"/api/budgets/category/{category}")
    assert [b["name"] for b in response.json()] == ["Current"]


@pytest.mark.asyncio
async def test_check_limits(async_client, db_session):
    category = uuid4()
    await async_client.post("/api/budgets/", json=budget_payload(amount="100", category_id=category))
    await add_expense(db_session, "80", category)

    response = await async_client.post(
        "/api/budgets/check-limits", json={"category_id": str(category), "amount": "20"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"allowed": True}

    response = await async_client.post(
        "/api/budgets/check-limits", json={"category_id": str(category), "amount": "50"}
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["kind"] == "insufficient_funds"


@pytest.mark.asyncio
async def test_alerts(async_client, db_session):
    category = uuid4()
    await async_client.post("/api/budgets/", json=budget_payload(name="Food", amount="100", category_id=category))
    await add_expense(db_session, "85", category)

    response = await async_client.get("/api/budgets/alerts")

    assert response.status_code == status.HTTP_200_OK
    alerts = response.json()
    assert len(alerts) == 1
    assert alerts[0]["alert_type"] == "near_limit"
    assert alerts[0]["severity"] == "warning"


@pytest.mark.asyncio
async def test_spent_delta_and_recalculate(async_client, db_session):
    category = uuid4()
    created = await async_client.post("/api/budgets/", json=budget_payload(category_id=category))
    budget_id = created.json()["id"]

    response = await async_client.post(f"/api/budgets/{budget_id}/spent", json={"amount": "40"})
    assert response.status_code == status.HTTP_200_OK
    assert Decimal(response.json()["spent"]) == Decimal("40")

    await add_expense(db_session, "15", category)
    response = await async_client.post(f"/api/budgets/{budget_id}/recalculate")
    assert response.status_code == status.HTTP_200_OK
    assert Decimal(response.json()["spent"]) == Decimal("15")


@pytest.mark.asyncio
async def test_health_check(async_client):
    """Test the health check endpoints."""
    response = await async_client.get("/api/health/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["environment"] == "testing"
    assert "X-Request-ID" in response.headers

    response = await async_client.get("/api/health/db")
    assert response.json()["database"] == "connected"
    assert response.json()["budgets"] == 0
