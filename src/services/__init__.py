"""
Services module for business logic.

Provides the in-memory stores behind the API: shop settings, the mock
catalog, paid tickets, round sessions and the mock checkout.
"""

from services.catalog import MockCatalog, clear_catalog, get_catalog
from services.checkout import CheckoutService, clear_checkout_service, get_checkout_service
from services.session_manager import (
    RoundSessionManager,
    clear_round_sessions,
    get_round_session_manager,
)
from services.settings_store import SettingsStore, clear_settings_store, get_settings_store
from services.ticket_ledger import TicketLedger, clear_ticket_ledger, get_ticket_ledger


def reset_services() -> None:
    """Drop every singleton so the next access rebuilds it. Used by tests."""
    clear_settings_store()
    clear_ticket_ledger()
    clear_round_sessions()
    clear_checkout_service()
    clear_catalog()


__all__ = [
    "CheckoutService",
    "MockCatalog",
    "RoundSessionManager",
    "SettingsStore",
    "TicketLedger",
    "get_catalog",
    "get_checkout_service",
    "get_round_session_manager",
    "get_settings_store",
    "get_ticket_ledger",
    "reset_services",
]
