from datetime import date

from fastapi import status

from timebill.models import PaymentType


class TestClientsAPI:
    """
    Test cases for client, balance and error-format behavior of the API
    """

    def test_create_and_get(self, client):
        response = client.post(
            "/api/v1/clients/",
            json={"name": "Acme", "hourly_rate": 1500, "activity_category": "acme"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        created = response.json()
        assert created["name"] == "Acme"
        assert created["hourly_rate"] == "1500.00"
        assert created["is_active"] is True

        fetched = client.get(f"/api/v1/clients/{created['id']}")
        assert fetched.status_code == status.HTTP_200_OK
        assert fetched.json()["activity_category"] == "acme"

    def test_duplicate_name_conflict(self, client, make_client):
        make_client(name="Acme")

        response = client.post("/api/v1/clients/", json={"name": "Acme", "hourly_rate": 10})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "resource_already_exists"

    def test_validation_error_format(self, client):
        response = client.post("/api/v1/clients/", json={"name": "", "hourly_rate": -5})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["error"] == "validation_error"
        assert "name" in body["details"]
        assert "hourly_rate" in body["details"]

    def test_patch_and_deactivate(self, client, make_client):
        existing = make_client(name="Acme", hourly_rate="100.00")

        patched = client.patch(f"/api/v1/clients/{existing.id}", json={"hourly_rate": 120})
        assert patched.status_code == status.HTTP_200_OK
        assert patched.json()["hourly_rate"] == "120.00"
        assert patched.json()["name"] == "Acme"

        deactivated = client.delete(f"/api/v1/clients/{existing.id}")
        assert deactivated.status_code == status.HTTP_200_OK
        assert deactivated.json()["is_active"] is False

        active = client.get("/api/v1/clients/", params={"active_only": True}).json()
        assert existing.id not in [item["id"] for item in active]

    def test_missing_client(self, client):
        response = client.get("/api/v1/clients/999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {
            "error": "resource_not_found",
            "message": "Client 999 not found",
            "details": {"client_id": 999},
        }

    def test_balance(self, client, make_client, make_entry, make_payment):
        owner = make_client(hourly_rate="1800.00")
        make_entry(owner, date(2024, 6, 1), hours=10, minutes=0)
        make_payment(owner, PaymentType.MONEY, amount="500000.00")

        response = client.get(f"/api/v1/clients/{owner.id}/balance")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["client"]["id"] == owner.id
        assert body["earnings"]["total_amount"] == "18000.00"
        assert body["payments"]["total_paid"] == "500000.00"
        assert body["balance"] == {"amount": "482000.00", "status": "client_credit"}
        assert body["unbilled"]["formatted_time"] == "10h 0m"

    def test_balance_for_unknown_client(self, client):
        response = client.get("/api/v1/clients/999/balance")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "client_not_found"

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/v1/clients/", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"


class TestTimeEntriesAndPaymentsAPI:
    def test_time_entry_crud(self, client, make_client):
        owner = make_client()

        created = client.post(
            "/api/v1/time-entries/",
            json={"client_id": owner.id, "work_date": "2024-06-01", "hours": 1, "minutes": 45},
        )
        assert created.status_code == status.HTTP_201_CREATED
        entry = created.json()
        assert entry["total_minutes"] == 105
        assert entry["source"] == "manual"

        patched = client.patch(f"/api/v1/time-entries/{entry['id']}", json={"minutes": 0})
        assert patched.json()["total_minutes"] == 60

        totals = client.get(f"/api/v1/time-entries/totals/{owner.id}").json()
        assert totals["formatted_time"] == "1h 0m"

        unbilled = client.get("/api/v1/time-entries/unbilled", params={"client_id": owner.id})
        assert unbilled.json()["total"] == 1

        deleted = client.delete(f"/api/v1/time-entries/{entry['id']}")
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"/api/v1/time-entries/{entry['id']}").status_code == 404

    def test_minutes_out_of_range(self, client, make_client):
        owner = make_client()

        response = client.post(
            "/api/v1/time-entries/",
            json={"client_id": owner.id, "work_date": "2024-06-01", "hours": 1, "minutes": 60},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_time_entry_for_unknown_client(self, client):
        response = client.post(
            "/api/v1/time-entries/",
            json={"client_id": 999, "work_date": "2024-06-01", "hours": 1},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "invalid_reference"

    def test_billed_entry_cannot_be_patched(self, client, make_client, make_entry):
        owner = make_client()
        entry = make_entry(owner)
        client.post(
            "/api/v1/bills/from-entries",
            json={"client_id": owner.id, "time_entry_ids": [entry.id]},
        )

        response = client.patch(f"/api/v1/time-entries/{entry.id}", json={"hours": 9})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "billed_entry_locked"

    def test_payments(self, client, make_client):
        owner = make_client()

        money = client.post(
            "/api/v1/payments/",
            json={
                "client_id": owner.id,
                "payment_date": "2024-06-10",
                "payment_type": "money",
                "amount": 300,
            },
        )
        assert money.status_code == status.HTTP_201_CREATED

        missing_description = client.post(
            "/api/v1/payments/",
            json={"client_id": owner.id, "payment_date": "2024-06-10", "payment_type": "supplements"},
        )
        assert missing_description.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        totals = client.get(f"/api/v1/payments/totals/{owner.id}").json()
        assert totals["overall"] == {"count": 1, "total_amount": "300.00"}
        assert totals["by_type"][0]["payment_type"] == "money"
