"""
Integration tests for the billing lifecycle.
Tracks time, records payments, bills the work, moves the bill through its
statuses and checks the balance at each step, all through the HTTP API.
"""
import pytest
from fastapi import status


@pytest.fixture
def acme(client):
    response = client.post("/api/v1/clients/", json={"name": "Acme", "hourly_rate": 1200})
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def log_time(client, client_id, work_date, hours, minutes=0):
    response = client.post(
        "/api/v1/time-entries/",
        json={"client_id": client_id, "work_date": work_date, "hours": hours, "minutes": minutes},
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def balance_of(client, client_id):
    response = client.get(f"/api/v1/clients/{client_id}/balance")
    assert response.status_code == status.HTTP_200_OK
    return response.json()


def test_bill_lifecycle(client, acme):
    log_time(client, acme["id"], "2024-06-01", 3, 30)
    log_time(client, acme["id"], "2024-06-02", 2, 45)
    later = log_time(client, acme["id"], "2024-07-01", 1)

    client.post(
        "/api/v1/payments/",
        json={
            "client_id": acme["id"],
            "payment_date": "2024-06-05",
            "payment_type": "money",
            "amount": 5000,
        },
    )

    # 7h15m worked at 1200/h
    balance = balance_of(client, acme["id"])
    assert balance["earnings"]["total_amount"] == "8700.00"
    assert balance["balance"] == {"amount": "-3700.00", "status": "client_owes"}
    assert balance["unbilled"]["entries_count"] == 3

    bill = client.post(
        "/api/v1/bills/from-range",
        json={
            "client_id": acme["id"],
            "period_from": "2024-06-01",
            "period_to": "2024-06-30",
            "issue_date": "2024-06-30",
        },
    ).json()
    assert bill["bill_number"] == "INV-2024-001"
    assert (bill["total_hours"], bill["total_minutes"]) == (6, 15)
    assert bill["total_amount"] == "7500.00"

    # Billing does not change what was earned, only what is still unbilled
    balance = balance_of(client, acme["id"])
    assert balance["earnings"]["total_amount"] == "8700.00"
    assert balance["unbilled"]["entries_count"] == 1
    assert balance["unbilled"]["amount"] == "1200.00"

    for next_status in ("issued", "paid"):
        response = client.patch(f"/api/v1/bills/{bill['id']}", json={"status": next_status})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == next_status

    # Paid bills are final
    response = client.patch(f"/api/v1/bills/{bill['id']}", json={"status": "cancelled"})
    assert response.status_code == status.HTTP_409_CONFLICT

    # The July entry can still be billed on its own as an act
    act = client.post(
        "/api/v1/bills/from-entries",
        json={
            "client_id": acme["id"],
            "time_entry_ids": [later["id"]],
            "bill_type": "act",
            "issue_date": "2024-07-31",
        },
    ).json()
    assert act["bill_number"] == "ACT-2024-001"

    unbilled = client.get("/api/v1/time-entries/unbilled", params={"client_id": acme["id"]})
    assert unbilled.json()["total"] == 0

    # Deleting the invoice releases its entries
    deleted = client.delete(f"/api/v1/bills/{bill['id']}").json()
    assert deleted["released_entries"] == 2

    unbilled = client.get("/api/v1/time-entries/unbilled", params={"client_id": acme["id"]})
    assert unbilled.json()["total"] == 2
    assert all(entry["bill_id"] is None for entry in unbilled.json()["items"])

    listing = client.get("/api/v1/bills/", params={"client_id": acme["id"]}).json()
    assert [item["bill_number"] for item in listing["items"]] == ["ACT-2024-001"]
