from datetime import date

import pytest
from fastapi import status

from timebill.models import TimeEntry


class TestBillsAPI:
    """
    Test cases for the bill endpoints

    Note: These tests use routes with the '/api/v1' prefix to match the actual application setup
    """

    @pytest.fixture
    def billable(self, make_client, make_entry):
        client = make_client(hourly_rate="600.00")
        entries = [
            make_entry(client, date(2024, 6, 1), hours=1, minutes=20),
            make_entry(client, date(2024, 6, 2), hours=0, minutes=40),
        ]
        return client, entries

    def test_create_from_entries(self, client, billable):
        owner, entries = billable

        response = client.post(
            "/api/v1/bills/from-entries",
            json={
                "client_id": owner.id,
                "time_entry_ids": [entry.id for entry in entries],
                "issue_date": "2024-06-30",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["bill_number"] == "INV-2024-001"
        assert body["bill_type"] == "invoice"
        assert body["status"] == "draft"
        assert body["total_hours"] == 2
        assert body["total_minutes"] == 0
        assert body["total_amount"] == "1200.00"
        assert body["period_from"] == "2024-06-01"
        assert body["period_to"] == "2024-06-02"
        assert body["client"]["name"] == owner.name
        assert [entry["id"] for entry in body["time_entries"]] == [e.id for e in entries]
        assert all(entry["is_billed"] for entry in body["time_entries"])

    def test_create_act_from_range(self, client, billable):
        owner, _ = billable

        response = client.post(
            "/api/v1/bills/from-range",
            json={
                "client_id": owner.id,
                "period_from": "2024-06-01",
                "period_to": "2024-06-30",
                "bill_type": "act",
                "issue_date": "2024-07-01",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["bill_number"] == "ACT-2024-001"

    def test_range_must_be_ordered(self, client, billable):
        owner, _ = billable

        response = client.post(
            "/api/v1/bills/from-range",
            json={"client_id": owner.id, "period_from": "2024-06-30", "period_to": "2024-06-01"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"

    def test_empty_range(self, client, billable):
        owner, _ = billable

        response = client.post(
            "/api/v1/bills/from-range",
            json={"client_id": owner.id, "period_from": "2023-01-01", "period_to": "2023-01-31"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "no_unbilled_entries"

    def test_unknown_client(self, client):
        response = client.post(
            "/api/v1/bills/from-entries", json={"client_id": 999, "time_entry_ids": [1]}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "invalid_client"

    def test_empty_selection(self, client, billable):
        owner, _ = billable

        response = client.post(
            "/api/v1/bills/from-entries", json={"client_id": owner.id, "time_entry_ids": []}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "empty_selection"

    def test_already_billed_names_the_entry(self, client, billable):
        owner, entries = billable
        payload = {"client_id": owner.id, "time_entry_ids": [entries[0].id]}
        assert client.post("/api/v1/bills/from-entries", json=payload).status_code == 201

        response = client.post("/api/v1/bills/from-entries", json=payload)

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["error"] == "already_billed"
        assert body["details"]["time_entry_id"] == entries[0].id

    def test_get_list_patch_and_delete(self, client, db, billable):
        owner, entries = billable
        created = client.post(
            "/api/v1/bills/from-entries",
            json={"client_id": owner.id, "time_entry_ids": [e.id for e in entries]},
        ).json()
        bill_url = f"/api/v1/bills/{created['id']}"

        assert client.get(bill_url).json()["bill_number"] == created["bill_number"]

        listing = client.get("/api/v1/bills/", params={"client_id": owner.id}).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == created["id"]

        patched = client.patch(bill_url, json={"status": "issued", "notes": "sent"})
        assert patched.status_code == status.HTTP_200_OK
        assert patched.json()["status"] == "issued"
        assert patched.json()["notes"] == "sent"

        illegal = client.put(bill_url, json={"status": "draft"})
        assert illegal.status_code == status.HTTP_409_CONFLICT
        assert illegal.json()["error"] == "invalid_status_transition"

        deleted = client.delete(bill_url)
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json() == {
            "success": True,
            "id": created["id"],
            "released_entries": 2,
        }
        assert client.get(bill_url).status_code == status.HTTP_404_NOT_FOUND

        db.expire_all()
        assert db.query(TimeEntry).filter(TimeEntry.is_billed.is_(True)).count() == 0

    def test_delete_missing_bill(self, client):
        response = client.delete("/api/v1/bills/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "resource_not_found"
