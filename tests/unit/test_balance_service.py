from datetime import date
from decimal import Decimal

import pytest

from timebill.core.exceptions import ClientNotFoundException, ResourceNotFoundException
from timebill.models import PaymentType
from timebill.schemas.bill import BillOptions
from timebill.services.balance_service import BalanceService
from timebill.services.billing_service import BillingService


class TestBalanceCalculation:
    """
    Test cases for the client balance report
    """

    @pytest.fixture
    def service(self, db):
        return BalanceService(db)

    @pytest.mark.asyncio
    async def test_client_in_credit(self, service, make_client, make_entry, make_payment):
        client = make_client(hourly_rate="1800.00")
        make_entry(client, hours=10, minutes=0)
        make_payment(client, PaymentType.MONEY, amount="500000.00")

        report = await service.calculate_balance(client.id)

        assert report.earnings.total_amount == Decimal("18000.00")
        assert report.earnings.hourly_rate == Decimal("1800.00")
        assert report.payments.money == Decimal("500000.00")
        assert report.payments.total_paid == Decimal("500000.00")
        assert report.balance.amount == Decimal("482000.00")
        assert report.balance.status == "client_credit"
        assert report.time_worked.total_hours == 10
        assert report.time_worked.total_minutes == 0
        assert report.time_worked.total_minutes_sum == 600
        assert report.time_worked.formatted_time == "10h 0m"
        assert report.unbilled.entries_count == 1
        assert report.unbilled.amount == Decimal("18000.00")

    @pytest.mark.asyncio
    async def test_client_owes(self, service, make_client, make_entry, make_payment):
        client = make_client(hourly_rate="600.00")
        make_entry(client, hours=2, minutes=30)
        make_payment(client, PaymentType.MONEY, amount="1000.00")

        report = await service.calculate_balance(client.id)

        assert report.earnings.total_amount == Decimal("1500.00")
        assert report.balance.amount == Decimal("-500.00")
        assert report.balance.status == "client_owes"

    @pytest.mark.asyncio
    async def test_zero_balance_counts_as_credit(self, service, make_client):
        client = make_client()

        report = await service.calculate_balance(client.id)

        assert report.balance.amount == Decimal("0")
        assert report.balance.status == "client_credit"
        assert report.time_worked.total_entries == 0

    @pytest.mark.asyncio
    async def test_supplements_count_and_other_does_not(
        self, service, make_client, make_entry, make_payment
    ):
        client = make_client(hourly_rate="600.00")
        make_entry(client, hours=1)
        make_payment(client, PaymentType.MONEY, amount="200.00")
        supplement = make_payment(
            client,
            PaymentType.SUPPLEMENTS,
            amount="300.00",
            supplements_description="Laptop stand",
        )
        make_payment(client, PaymentType.OTHER, amount="1000.00")

        report = await service.calculate_balance(client.id)

        assert report.payments.supplements == Decimal("300.00")
        assert report.payments.other == Decimal("1000.00")
        assert report.payments.total_paid == Decimal("500.00")
        assert report.balance.amount == Decimal("-100.00")
        assert [item.id for item in report.payments.supplements_list] == [supplement.id]
        assert report.payments.supplements_list[0].description == "Laptop stand"

    @pytest.mark.asyncio
    async def test_unbilled_excludes_billed_work(
        self, service, db, make_client, make_entry
    ):
        client = make_client(hourly_rate="60.00")
        billed = make_entry(client, date(2024, 6, 1), hours=2)
        make_entry(client, date(2024, 6, 2), hours=0, minutes=45)
        await BillingService(db).generate_from_entries(
            client.id, [billed.id], BillOptions(issue_date=date(2024, 6, 30))
        )

        report = await service.calculate_balance(client.id)

        assert report.time_worked.total_minutes_sum == 165
        assert report.earnings.total_amount == Decimal("165.00")
        assert report.unbilled.total_minutes_sum == 45
        assert report.unbilled.total_hours == 0
        assert report.unbilled.total_minutes == 45
        assert report.unbilled.formatted_time == "0h 45m"
        assert report.unbilled.amount == Decimal("45.00")
        assert report.unbilled.entries_count == 1

    @pytest.mark.asyncio
    async def test_unknown_client(self, service):
        with pytest.raises(ClientNotFoundException) as exc_info:
            await service.calculate_balance(999)

        assert isinstance(exc_info.value, ResourceNotFoundException)
        assert exc_info.value.status_code == 404
