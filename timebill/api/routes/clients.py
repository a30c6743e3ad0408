import logging
from typing import List

from fastapi import APIRouter, Depends, status

from timebill.api.deps import get_balance_service, get_client_service
from timebill.core.logging import log_context
from timebill.schemas.balance import BalanceReport
from timebill.schemas.client import Client, ClientCreate, ClientUpdate
from timebill.services.balance_service import BalanceService
from timebill.services.client_service import ClientService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[Client])
async def list_clients(
    active_only: bool = False,
    client_service: ClientService = Depends(get_client_service()),
) -> List[Client]:
    """List clients ordered by name"""
    with log_context(action="list_clients", active_only=active_only):
        return await client_service.list_clients(active_only=active_only)


@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    client_service: ClientService = Depends(get_client_service()),
) -> Client:
    with log_context(action="create_client"):
        logger.info(f"Creating client: {data.name}")
        return await client_service.create_client(data)


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: int,
    client_service: ClientService = Depends(get_client_service()),
) -> Client:
    with log_context(client_id=client_id, action="get_client"):
        return await client_service.get_client(client_id)


@router.patch("/{client_id}", response_model=Client)
@router.put("/{client_id}", response_model=Client, include_in_schema=False)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    client_service: ClientService = Depends(get_client_service()),
) -> Client:
    """Apply a partial update; only the fields sent are changed"""
    with log_context(client_id=client_id, action="update_client"):
        return await client_service.update_client(client_id, data)


@router.delete("/{client_id}", response_model=Client)
async def deactivate_client(
    client_id: int,
    client_service: ClientService = Depends(get_client_service()),
) -> Client:
    """Soft delete: the client is marked inactive and keeps its history"""
    with log_context(client_id=client_id, action="deactivate_client"):
        return await client_service.deactivate_client(client_id)


@router.get("/{client_id}/balance", response_model=BalanceReport)
async def get_client_balance(
    client_id: int,
    balance_service: BalanceService = Depends(get_balance_service()),
) -> BalanceReport:
    """Earnings, payments, unbilled work and the resulting balance for a client"""
    with log_context(client_id=client_id, action="get_balance"):
        return await balance_service.calculate_balance(client_id)
