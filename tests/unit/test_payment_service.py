from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from timebill.core.exceptions import (
    InvalidReferenceException,
    ResourceNotFoundException,
    ValidationException,
)
from timebill.models import PaymentType
from timebill.schemas.payment import PaymentCreate, PaymentUpdate
from timebill.services.payment_service import PaymentService


class TestPaymentSchemas:
    def test_money_requires_positive_amount(self):
        with pytest.raises(ValidationError):
            PaymentCreate(
                client_id=1, payment_date=date(2024, 6, 1), payment_type=PaymentType.MONEY
            )
        with pytest.raises(ValidationError):
            PaymentCreate(
                client_id=1,
                payment_date=date(2024, 6, 1),
                payment_type=PaymentType.MONEY,
                amount=Decimal("0"),
            )

    def test_supplements_require_description(self):
        with pytest.raises(ValidationError):
            PaymentCreate(
                client_id=1,
                payment_date=date(2024, 6, 1),
                payment_type=PaymentType.SUPPLEMENTS,
                supplements_description="   ",
            )

    def test_other_needs_nothing_extra(self):
        payment = PaymentCreate(
            client_id=1, payment_date=date(2024, 6, 1), payment_type=PaymentType.OTHER
        )
        assert payment.amount is None


class TestPaymentService:
    @pytest.fixture
    def service(self, db):
        return PaymentService(db)

    @pytest.mark.asyncio
    async def test_create_for_unknown_client(self, service):
        with pytest.raises(InvalidReferenceException):
            await service.create_payment(
                PaymentCreate(
                    client_id=55,
                    payment_date=date(2024, 6, 1),
                    payment_type=PaymentType.MONEY,
                    amount=Decimal("10.00"),
                )
            )

    @pytest.mark.asyncio
    async def test_update_checks_merged_state(self, service, make_client, make_payment):
        payment = make_payment(make_client(), PaymentType.OTHER, amount=None)

        # Switching to money without an amount leaves an invalid row
        with pytest.raises(ValidationException):
            await service.update_payment(
                payment.id, PaymentUpdate(payment_type=PaymentType.MONEY)
            )

        updated = await service.update_payment(
            payment.id,
            PaymentUpdate(payment_type=PaymentType.MONEY, amount=Decimal("250.00")),
        )
        assert updated.payment_type == PaymentType.MONEY
        assert updated.amount == Decimal("250.00")

    @pytest.mark.asyncio
    async def test_update_to_unknown_client(self, service, make_client, make_payment):
        payment = make_payment(make_client())

        with pytest.raises(InvalidReferenceException):
            await service.update_payment(payment.id, PaymentUpdate(client_id=999))

    @pytest.mark.asyncio
    async def test_delete(self, service, make_client, make_payment):
        payment = make_payment(make_client())

        assert await service.delete_payment(payment.id) is True
        with pytest.raises(ResourceNotFoundException):
            await service.get_payment(payment.id)

    @pytest.mark.asyncio
    async def test_list_filters_by_type_and_dates(self, service, make_client, make_payment):
        client = make_client()
        june = make_payment(client, PaymentType.MONEY, payment_date=date(2024, 6, 15))
        make_payment(client, PaymentType.MONEY, payment_date=date(2024, 5, 15))
        make_payment(
            client,
            PaymentType.SUPPLEMENTS,
            payment_date=date(2024, 6, 20),
            supplements_description="Books",
        )

        payments = await service.list_payments(
            client_id=client.id,
            payment_type=PaymentType.MONEY,
            date_from=date(2024, 6, 1),
            date_to=date(2024, 6, 30),
        )

        assert [payment.id for payment in payments] == [june.id]

    @pytest.mark.asyncio
    async def test_totals_by_client(self, service, make_client, make_payment):
        client = make_client()
        make_payment(client, PaymentType.MONEY, amount="100.50")
        make_payment(client, PaymentType.MONEY, amount="99.50")
        make_payment(
            client, PaymentType.SUPPLEMENTS, amount=None, supplements_description="Tea"
        )

        totals = await service.get_totals_by_client(client.id)

        assert totals.amount_for(PaymentType.MONEY) == Decimal("200.00")
        assert totals.amount_for(PaymentType.SUPPLEMENTS) == Decimal("0")
        assert totals.amount_for(PaymentType.OTHER) == Decimal("0")
        by_type = {row.payment_type: row.count for row in totals.by_type}
        assert by_type == {PaymentType.MONEY: 2, PaymentType.SUPPLEMENTS: 1}
        assert totals.overall.count == 3
        assert totals.overall.total_amount == Decimal("200.00")
