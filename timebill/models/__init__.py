# timebill/models/__init__.py
from timebill.models.client import Client
from timebill.models.time_entry import TimeEntry, TimeEntrySource
from timebill.models.payment import Payment, PaymentType
from timebill.models.bill import (
    Bill,
    BillType,
    BillStatus,
    BILL_STATUS_TRANSITIONS,
    BILL_NUMBER_PREFIXES,
)
