from decimal import Decimal

import pytest
from pydantic import ValidationError

from timebill.core.exceptions import (
    BusinessException,
    DuplicateResourceException,
    ResourceNotFoundException,
    ValidationException,
)
from timebill.schemas.client import ClientCreate, ClientUpdate
from timebill.services.client_service import ClientService


class TestClientService:
    @pytest.fixture
    def service(self, db):
        return ClientService(db)

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, service):
        client = await service.create_client(
            ClientCreate(name="  Acme  ", hourly_rate=Decimal("1500.00"))
        )

        fetched = await service.get_client(client.id)

        assert fetched.name == "Acme"
        assert fetched.hourly_rate == Decimal("1500.00")
        assert fetched.is_active is True

    def test_blank_name_is_invalid(self):
        with pytest.raises(ValidationError):
            ClientCreate(name="   ", hourly_rate=Decimal("10"))

    @pytest.mark.asyncio
    async def test_duplicate_name(self, service, make_client):
        make_client(name="Acme")

        with pytest.raises(DuplicateResourceException):
            await service.create_client(ClientCreate(name="Acme", hourly_rate=Decimal("1")))

    @pytest.mark.asyncio
    async def test_names_are_case_sensitive(self, service, make_client):
        make_client(name="Acme")

        client = await service.create_client(ClientCreate(name="acme", hourly_rate=Decimal("1")))

        assert client.name == "acme"

    @pytest.mark.asyncio
    async def test_rename_to_taken_name(self, service, make_client):
        make_client(name="Acme")
        other = make_client(name="Globex")

        with pytest.raises(DuplicateResourceException):
            await service.update_client(other.id, ClientUpdate(name="Acme"))

    @pytest.mark.asyncio
    async def test_partial_update(self, service, make_client):
        client = make_client(name="Acme", hourly_rate="100.00")

        updated = await service.update_client(
            client.id, ClientUpdate(activity_category="acme-work")
        )

        assert updated.activity_category == "acme-work"
        assert updated.hourly_rate == Decimal("100.00")
        assert updated.name == "Acme"

    @pytest.mark.asyncio
    async def test_rate_cannot_be_nulled(self, service, make_client):
        client = make_client()

        with pytest.raises(ValidationException):
            await service.update_client(client.id, ClientUpdate(hourly_rate=None))

    @pytest.mark.asyncio
    async def test_deactivate(self, service, make_client):
        client = make_client()

        deactivated = await service.deactivate_client(client.id)

        assert deactivated.is_active is False
        with pytest.raises(BusinessException) as exc_info:
            await service.deactivate_client(client.id)
        assert exc_info.value.message == "Client is already inactive"

    @pytest.mark.asyncio
    async def test_list_active_only_ordered_by_name(self, service, make_client):
        make_client(name="Zeta")
        make_client(name="Alpha")
        make_client(name="Mid", is_active=False)

        active = await service.list_clients(active_only=True)
        everyone = await service.list_clients()

        assert [client.name for client in active] == ["Alpha", "Zeta"]
        assert [client.name for client in everyone] == ["Alpha", "Mid", "Zeta"]

    @pytest.mark.asyncio
    async def test_missing_client(self, service):
        with pytest.raises(ResourceNotFoundException):
            await service.get_client(31337)

    @pytest.mark.asyncio
    async def test_lookup_by_name(self, service, make_client):
        acme = make_client(name="Acme")

        assert (await service.get_client_by_name("Acme")).id == acme.id
        assert await service.get_client_by_name("acme") is None
