"""
Paid-ticket ledger.

Records which tiers a client has bought a ticket for, keyed by the client
id the front-end sends (one per browser). It takes the client at its word:
this is a demo convenience, not a security boundary.
"""

import threading
from typing import Dict, Optional, Set

from core.logging import LoggerMixin


class TicketLedger(LoggerMixin):
    """
    Thread-safe per-client, per-tier record of paid tickets.

    Usage:
        ledger = TicketLedger()
        ledger.mark_paid("browser-1", "t30")
        ledger.is_paid("browser-1", "t30")  # True
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._paid: Dict[str, Set[str]] = {}

    def is_paid(self, client_id: str, tier_id: str) -> bool:
        with self._lock:
            return tier_id in self._paid.get(client_id, set())

    def mark_paid(self, client_id: str, tier_id: str) -> None:
        with self._lock:
            self._paid.setdefault(client_id, set()).add(tier_id)
        self.logger.info("Ticket marked paid", client_id=client_id, tier_id=tier_id)

    def paid_tiers(self, client_id: str) -> Set[str]:
        with self._lock:
            return set(self._paid.get(client_id, set()))


_ledger: Optional[TicketLedger] = None


def get_ticket_ledger() -> TicketLedger:
    """Get the ticket ledger singleton."""
    global _ledger
    if _ledger is None:
        _ledger = TicketLedger()
    return _ledger


def clear_ticket_ledger() -> None:
    global _ledger
    _ledger = None
