import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timebill.core.exceptions import (
    BusinessException,
    DuplicateResourceException,
    ResourceNotFoundException,
)
from timebill.models import Client
from timebill.repositories.client_repository import ClientRepository
from timebill.schemas.client import ClientCreate, ClientUpdate
from timebill.utils.patch import reject_null_fields

# Set up module logger
logger = logging.getLogger(__name__)

# Columns that may not be patched to null
_REQUIRED_FIELDS = ("name", "hourly_rate", "is_active")


class ClientService:
    """Service for the client directory."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = ClientRepository(db)

    async def get_client(self, client_id: int) -> Client:
        client = self.repository.get(client_id)
        if not client:
            logger.warning(f"Client {client_id} not found")
            raise ResourceNotFoundException(
                f"Client {client_id} not found", details={"client_id": client_id}
            )
        return client

    async def get_client_by_name(self, name: str) -> Optional[Client]:
        return self.repository.get_by_name(name)

    async def list_clients(self, active_only: bool = False) -> List[Client]:
        return self.repository.list_clients(active_only=active_only)

    async def create_client(self, data: ClientCreate) -> Client:
        if self.repository.get_by_name(data.name):
            raise DuplicateResourceException(
                f"Client with name '{data.name}' already exists",
                details={"name": data.name},
            )

        try:
            client = self.repository.create(data)
        except IntegrityError:
            # Lost a race against a concurrent create with the same name
            self.db.rollback()
            raise DuplicateResourceException(
                f"Client with name '{data.name}' already exists",
                details={"name": data.name},
            )

        logger.info(f"Created client {client.id} ({client.name})")
        return client

    async def update_client(self, client_id: int, data: ClientUpdate) -> Client:
        client = await self.get_client(client_id)
        reject_null_fields(data, _REQUIRED_FIELDS)

        if data.name is not None and data.name != client.name:
            existing = self.repository.get_by_name(data.name)
            if existing and existing.id != client.id:
                raise DuplicateResourceException(
                    f"Client with name '{data.name}' already exists",
                    details={"name": data.name},
                )

        try:
            client = self.repository.update(client, data)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateResourceException(
                f"Client with name '{data.name}' already exists",
                details={"name": data.name},
            )

        logger.info(f"Updated client {client.id}")
        return client

    async def deactivate_client(self, client_id: int) -> Client:
        """Soft delete: clients keep their entries, payments and bills"""
        client = await self.get_client(client_id)
        if not client.is_active:
            raise BusinessException(
                "Client is already inactive",
                code="client_inactive",
                details={"client_id": client_id},
            )

        client = self.repository.deactivate(client)
        logger.info(f"Deactivated client {client.id}")
        return client
