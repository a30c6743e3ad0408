import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from timebill.api.deps import get_billing_service
from timebill.core.logging import log_context
from timebill.models.bill import BillStatus, BillType
from timebill.schemas.bill import (
    Bill,
    BillBase,
    BillDeleted,
    BillFromEntries,
    BillFromRange,
    BillList,
    BillUpdate,
)
from timebill.services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/from-entries", response_model=Bill, status_code=status.HTTP_201_CREATED)
async def create_bill_from_entries(
    data: BillFromEntries,
    billing_service: BillingService = Depends(get_billing_service()),
) -> Bill:
    """Bill an explicit selection of unbilled time entries"""
    with log_context(client_id=data.client_id, action="bill_from_entries"):
        logger.info(
            f"Generating {data.bill_type} for client {data.client_id} "
            f"from {len(data.time_entry_ids)} entries"
        )
        return await billing_service.generate_from_entries(
            data.client_id, data.time_entry_ids, data.options()
        )


@router.post("/from-range", response_model=Bill, status_code=status.HTTP_201_CREATED)
async def create_bill_from_range(
    data: BillFromRange,
    billing_service: BillingService = Depends(get_billing_service()),
) -> Bill:
    """Bill every unbilled time entry of a client within a date range"""
    with log_context(client_id=data.client_id, action="bill_from_range"):
        logger.info(
            f"Generating {data.bill_type} for client {data.client_id} "
            f"for {data.period_from}..{data.period_to}"
        )
        return await billing_service.generate_from_date_range(
            data.client_id, data.period_from, data.period_to, data.options()
        )


@router.get("/", response_model=BillList)
async def list_bills(
    client_id: Optional[int] = Query(None),
    bill_status: Optional[BillStatus] = Query(None, alias="status"),
    bill_type: Optional[BillType] = Query(None),
    billing_service: BillingService = Depends(get_billing_service()),
) -> BillList:
    with log_context(action="list_bills", client_id=client_id):
        bills = await billing_service.list_bills(
            client_id=client_id, status=bill_status, bill_type=bill_type
        )
        return BillList(
            items=[BillBase.model_validate(bill) for bill in bills], total=len(bills)
        )


@router.get("/{bill_id}", response_model=Bill)
async def get_bill(
    bill_id: int,
    billing_service: BillingService = Depends(get_billing_service()),
) -> Bill:
    """Get a bill with its client and time entries"""
    with log_context(bill_id=bill_id, action="get_bill"):
        return await billing_service.get_bill(bill_id)


@router.patch("/{bill_id}", response_model=Bill)
@router.put("/{bill_id}", response_model=Bill)
async def update_bill(
    bill_id: int,
    data: BillUpdate,
    billing_service: BillingService = Depends(get_billing_service()),
) -> Bill:
    """Patch bill fields or move it along its status lifecycle"""
    with log_context(bill_id=bill_id, action="update_bill"):
        return await billing_service.update_bill(bill_id, data)


@router.delete("/{bill_id}", response_model=BillDeleted)
async def delete_bill(
    bill_id: int,
    billing_service: BillingService = Depends(get_billing_service()),
) -> BillDeleted:
    """Delete a bill; its time entries become unbilled again"""
    with log_context(bill_id=bill_id, action="delete_bill"):
        return await billing_service.delete_bill(bill_id)
