# timebill/schemas/__init__.py
from timebill.schemas.client import Client, ClientCreate, ClientUpdate, ClientSummary
from timebill.schemas.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    TimeEntryList,
    TimeTotals,
)
from timebill.schemas.payment import (
    Payment,
    PaymentCreate,
    PaymentUpdate,
    PaymentTotals,
)
from timebill.schemas.bill import (
    Bill,
    BillBase,
    BillList,
    BillOptions,
    BillFromEntries,
    BillFromRange,
    BillUpdate,
    BillDeleted,
)
from timebill.schemas.balance import BalanceReport
from timebill.schemas.activity import (
    ActivityDuration,
    ActivityImportRequest,
    ActivityImportResult,
    ActivityStatus,
    ActivityBuckets,
    ActivityCategories,
)
