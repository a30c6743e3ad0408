import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from timebill.api.deps import get_payment_service
from timebill.core.logging import log_context
from timebill.models.payment import PaymentType
from timebill.schemas.payment import Payment, PaymentCreate, PaymentTotals, PaymentUpdate
from timebill.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[Payment])
async def list_payments(
    client_id: Optional[int] = Query(None),
    payment_type: Optional[PaymentType] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    payment_service: PaymentService = Depends(get_payment_service()),
) -> List[Payment]:
    """List payments, newest first"""
    with log_context(action="list_payments", client_id=client_id):
        return await payment_service.list_payments(
            client_id=client_id,
            payment_type=payment_type,
            date_from=date_from,
            date_to=date_to,
        )


@router.get("/totals/{client_id}", response_model=PaymentTotals)
async def get_payment_totals(
    client_id: int,
    payment_service: PaymentService = Depends(get_payment_service()),
) -> PaymentTotals:
    """Per-type and overall payment totals for a client"""
    with log_context(action="get_payment_totals", client_id=client_id):
        return await payment_service.get_totals_by_client(client_id)


@router.get("/{payment_id}", response_model=Payment)
async def get_payment(
    payment_id: int,
    payment_service: PaymentService = Depends(get_payment_service()),
) -> Payment:
    with log_context(action="get_payment", payment_id=payment_id):
        return await payment_service.get_payment(payment_id)


@router.post("/", response_model=Payment, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    payment_service: PaymentService = Depends(get_payment_service()),
) -> Payment:
    with log_context(action="create_payment", client_id=data.client_id):
        logger.info(f"Recording {data.payment_type} payment for client {data.client_id}")
        return await payment_service.create_payment(data)


@router.patch("/{payment_id}", response_model=Payment)
@router.put("/{payment_id}", response_model=Payment, include_in_schema=False)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    payment_service: PaymentService = Depends(get_payment_service()),
) -> Payment:
    with log_context(action="update_payment", payment_id=payment_id):
        return await payment_service.update_payment(payment_id, data)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: int,
    payment_service: PaymentService = Depends(get_payment_service()),
) -> Response:
    with log_context(action="delete_payment", payment_id=payment_id):
        await payment_service.delete_payment(payment_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
