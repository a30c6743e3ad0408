"""
Service registry module.

This module registers all services with the dependency injection system.
"""
# Import all service classes
from timebill.services.client_service import ClientService
from timebill.services.time_entry_service import TimeEntryService
from timebill.services.payment_service import PaymentService
from timebill.services.billing_service import BillingService
from timebill.services.balance_service import BalanceService
from timebill.services.activity_import_service import ActivityImportService


def register_services():
    """Register all services with the dependency injection system."""
    # Import register_service inside the function to avoid circular imports
    from timebill.utils.dependencies import register_service
    from timebill.integrations.activitywatch import get_activity_provider

    # Register each service with its factory function
    register_service(ClientService, lambda db: ClientService(db))
    register_service(TimeEntryService, lambda db: TimeEntryService(db))
    register_service(PaymentService, lambda db: PaymentService(db))
    register_service(BillingService, lambda db: BillingService(db))
    register_service(BalanceService, lambda db: BalanceService(db))
    register_service(
        ActivityImportService,
        lambda db: ActivityImportService(db, provider=get_activity_provider()),
    )
