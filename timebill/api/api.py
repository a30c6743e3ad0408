# timebill/api/api.py
from fastapi import APIRouter

from timebill.api.routes import (
    activity,
    bills,
    clients,
    payments,
    time_entries,
)

api_router = APIRouter()
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(
    time_entries.router, prefix="/time-entries", tags=["time_entries"]
)
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(bills.router, prefix="/bills", tags=["bills"])
api_router.include_router(activity.router, prefix="/activity", tags=["activity"])
