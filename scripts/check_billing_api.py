#!/usr/bin/env python3
"""
Manual check of the billing endpoints against a running server
"""
import json
import sys
from datetime import date

import requests

# Base URL
BASE_URL = "http://localhost:8000/api/v1"


def show(label, response):
    print(f"{label}: {response.status_code}")
    if response.headers.get("content-type", "").startswith("application/json"):
        print(json.dumps(response.json(), indent=2))


def check_billing(client_name="API check client"):
    print("\n1. Client...")
    response = requests.post(
        f"{BASE_URL}/clients/", json={"name": client_name, "hourly_rate": 1500}
    )
    if response.status_code == 409:
        existing = [c for c in requests.get(f"{BASE_URL}/clients/").json() if c["name"] == client_name]
        client = existing[0]
        print(f"Reusing client {client['id']}")
    elif response.status_code == 201:
        client = response.json()
        print(f"Created client {client['id']}")
    else:
        show("POST /clients", response)
        return False

    print("\n2. Time entries...")
    today = str(date.today())
    entry_ids = []
    for hours, minutes in ((1, 40), (2, 35)):
        response = requests.post(
            f"{BASE_URL}/time-entries/",
            json={"client_id": client["id"], "work_date": today, "hours": hours, "minutes": minutes},
        )
        print(f"POST /time-entries: {response.status_code}")
        entry_ids.append(response.json()["id"])

    print("\n3. Bill...")
    response = requests.post(
        f"{BASE_URL}/bills/from-entries",
        json={"client_id": client["id"], "time_entry_ids": entry_ids},
    )
    show("POST /bills/from-entries", response)
    if response.status_code != 201:
        return False
    bill = response.json()

    response = requests.post(
        f"{BASE_URL}/bills/from-entries",
        json={"client_id": client["id"], "time_entry_ids": entry_ids},
    )
    print(f"Billing the same entries again (should fail): {response.status_code}")
    if response.status_code == 409:
        print("✓ Correctly rejected already billed entries")

    print("\n4. Balance...")
    show("GET /balance", requests.get(f"{BASE_URL}/clients/{client['id']}/balance"))

    # Clean up - delete the bill, which releases the entries
    response = requests.delete(f"{BASE_URL}/bills/{bill['id']}")
    show(f"\nDELETE /bills/{bill['id']}", response)
    for entry_id in entry_ids:
        requests.delete(f"{BASE_URL}/time-entries/{entry_id}")
    return True


if __name__ == "__main__":
    print("Billing API Check Script")
    print("=" * 50)
    sys.exit(0 if check_billing() else 1)
