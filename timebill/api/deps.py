# timebill/api/deps.py
from timebill.services.activity_import_service import ActivityImportService
from timebill.services.balance_service import BalanceService
from timebill.services.billing_service import BillingService
from timebill.services.client_service import ClientService
from timebill.services.payment_service import PaymentService
from timebill.services.time_entry_service import TimeEntryService
from timebill.utils.dependencies import get_service


# Service dependencies - defined as functions that will be called at runtime
# These will only be evaluated after services have been registered
def get_client_service():
    return get_service(ClientService)


def get_time_entry_service():
    return get_service(TimeEntryService)


def get_payment_service():
    return get_service(PaymentService)


def get_billing_service():
    return get_service(BillingService)


def get_balance_service():
    return get_service(BalanceService)


def get_activity_import_service():
    return get_service(ActivityImportService)
