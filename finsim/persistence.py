"""
Persistence boundary for FinSim.

Purpose
-------
Defines what the simulation service needs from storage and provides two
implementations: an in-memory store (tests, embedding) and a JSON-file
store (the CLI).

Protocol
--------
``SimulationStore`` has three awaited operations:

- ``load_profile(user_id)``: the user's records, or ``DataUnavailableError``.
- ``reset_to_baseline(user_id)``: loans back to ``original_amount``,
  investments back to ``starting_balance``, simulation transactions, loan
  payments and credit history purged, profile summary reset. This is the
  single reset procedure used both by explicit resets and before each run.
- ``write_back(payload)``: store a run's final balances, ledgers and
  summary.

The core performs no locking; ``SimulationService`` serializes runs per user.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from .config import FinancialProfile, ProfileSummary, UserLedger
from .exceptions import DataUnavailableError
from .results import WriteBack
from .serialization import load_ledgers, save_ledgers

__all__ = [
    "SimulationStore",
    "InMemoryStore",
    "JsonFileStore",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class SimulationStore(Protocol):
    """Storage operations the simulation service depends on."""

    async def load_profile(self, user_id: str) -> FinancialProfile:
        ...

    async def reset_to_baseline(self, user_id: str) -> None:
        ...

    async def write_back(self, payload: WriteBack) -> None:
        ...


class InMemoryStore:
    """
    Dictionary-backed store keyed by user id.

    Records are frozen Pydantic models; updates replace them with
    ``model_copy(update=...)``.

    Examples
    --------
    >>> store = InMemoryStore()
    >>> store.add_user("demo", FinancialProfile())
    >>> store.ledger("demo").summary.current_credit_score
    300
    """

    def __init__(self, users: Optional[Dict[str, UserLedger]] = None):
        self._users: Dict[str, UserLedger] = dict(users or {})

    # -------------------- Sync accessors --------------------
    @property
    def users(self) -> Dict[str, UserLedger]:
        return dict(self._users)

    def add_user(self, user_id: str, profile: FinancialProfile) -> None:
        """Create or replace a user with fresh ledgers."""
        self._users[user_id] = UserLedger(profile=profile)
        self._commit()

    def ledger(self, user_id: str) -> UserLedger:
        try:
            return self._users[user_id]
        except KeyError:
            raise DataUnavailableError(f"No financial profile for user {user_id!r}.") from None

    # -------------------- Protocol --------------------
    async def load_profile(self, user_id: str) -> FinancialProfile:
        return self.ledger(user_id).profile

    async def reset_to_baseline(self, user_id: str) -> None:
        ledger = self.ledger(user_id)
        profile = ledger.profile
        loans = [l.model_copy(update={"current_balance": l.original_amount}) for l in profile.loans]
        investments = [
            i.model_copy(update={"current_balance": i.starting_balance}) for i in profile.investments
        ]
        self._users[user_id] = ledger.model_copy(
            update={
                "profile": profile.model_copy(update={"loans": loans, "investments": investments}),
                "summary": ProfileSummary(),
                "transactions": [t for t in ledger.transactions if not t.is_simulation],
                "loan_payments": [],
                "credit_history": [],
            }
        )
        self._commit()

    async def write_back(self, payload: WriteBack) -> None:
        ledger = self.ledger(payload.user_id)
        profile = ledger.profile
        loans = [
            l.model_copy(update={"current_balance": payload.loan_balances[l.id]})
            if l.id in payload.loan_balances else l
            for l in profile.loans
        ]
        investments = [
            i.model_copy(update={"current_balance": payload.investment_balances[i.id]})
            if i.id in payload.investment_balances else i
            for i in profile.investments
        ]
        self._users[payload.user_id] = ledger.model_copy(
            update={
                "profile": profile.model_copy(update={"loans": loans, "investments": investments}),
                "summary": payload.summary,
                "transactions": list(ledger.transactions) + list(payload.transactions),
                "loan_payments": list(ledger.loan_payments) + list(payload.loan_payments),
                "credit_history": list(ledger.credit_history) + list(payload.credit_history),
            }
        )
        self._commit()
        logger.debug(
            "Stored %d transactions, %d loan payments for user %s",
            len(payload.transactions),
            len(payload.loan_payments),
            payload.user_id,
        )

    def _commit(self) -> None:
        """Hook called after every change. No-op in memory."""


class JsonFileStore(InMemoryStore):
    """
    ``InMemoryStore`` mirrored to a JSON file after every change.

    Parameters
    ----------
    path : Path
        Data file. Created on first write if it does not exist.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        users = load_ledgers(self.path) if self.path.exists() else {}
        super().__init__(users)

    def _commit(self) -> None:
        save_ledgers(self._users, self.path)
