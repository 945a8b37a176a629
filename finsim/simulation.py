"""Simulation orchestrator for FinSim

Connects the loader, the action scheduler, the month stepper and the results
assembler into a run, and wraps runs with the persistence protocol that
keeps a user's stored balances and ledgers consistent.

Key components
--------------
- SimulationEngine:
    Pure, synchronous core. Owns one ``SimulationState`` and steps it
    through ``months`` iterations. One run per engine.

- simulate:
    Convenience: load a profile, run an engine, return result and final state.

- SimulationService:
    The entry points callers use. ``run`` resets the user's stored data to
    baseline, loads it, runs the engine and writes the results back;
    ``reset`` performs only the baseline reset. Both share the store's single
    ``reset_to_baseline`` procedure. Runs for the same user are serialized
    with a per-user lock; the pure computation never suspends.

Typical usage
-------------
>>> store = InMemoryStore()
>>> store.add_user("demo", profile)
>>> service = SimulationService(store)
>>> result = asyncio.run(service.run("demo", SimulationRequest(months=24)))
>>> result.final_credit_score
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .actions import Action, index_actions, parse_actions
from .config import FinancialProfile, SimulationRequest
from .credit import CreditScoreRecord
from .exceptions import FinSimError, PersistenceFailure, ValidationError
from .persistence import SimulationStore
from .results import SimulationResult, assemble_results, build_write_back
from .state import SimulationState, load_state
from .stepper import MonthRecord, step_month

__all__ = [
    "SimulationEngine",
    "SimulationService",
    "simulate",
    "build_request",
]

logger = logging.getLogger(__name__)

RawActions = Iterable[Union[Mapping, Action]]


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class SimulationEngine:
    """Month-by-month projection of one user's finances.

    The engine mutates the state it is given. Build a fresh state (via
    ``load_state``) for every run.
    """

    def __init__(self, state: SimulationState):
        self.state = state
        self.timeline: list[MonthRecord] = []
        self.credit_history: list[CreditScoreRecord] = []
        self._ran = False

    @classmethod
    def from_profile(cls, profile: Optional[FinancialProfile]) -> "SimulationEngine":
        return cls(load_state(profile))

    def run(self, months: int, actions: RawActions = ()) -> SimulationResult:
        """
        Simulate ``months`` months, applying ``actions`` on their months.

        Parameters
        ----------
        months : int
            Horizon. Callers validate the range (see ``build_request``).
        actions : iterable of Action or dict
            Interventions; dicts are parsed into typed actions.

        Returns
        -------
        SimulationResult
        """
        if self._ran:
            raise RuntimeError("engine already ran; build a new state for each run")
        self._ran = True

        schedule = index_actions(parse_actions(actions))
        logger.info(
            "Simulating %d months (%d loans, %d investments, %d scheduled months)",
            months,
            len(self.state.loans),
            len(self.state.investments),
            len(schedule),
        )

        for month in range(months):
            record, score = step_month(month, self.state, schedule.get(month, ()))
            self.timeline.append(record)
            self.credit_history.append(score)

        result = assemble_results(self.timeline, self.credit_history)
        logger.info(
            "Simulation finished: net worth %.2f, credit score %d",
            result.final_net_worth,
            result.final_credit_score,
        )
        return result


def simulate(
    profile: Optional[FinancialProfile],
    months: int,
    actions: RawActions = (),
) -> Tuple[SimulationResult, SimulationState]:
    """Run a fresh engine over ``profile`` and return the result and final state."""
    engine = SimulationEngine.from_profile(profile)
    result = engine.run(months, actions)
    return result, engine.state


def build_request(months: int, actions: RawActions = ()) -> SimulationRequest:
    """
    Validate a horizon and action list before anything runs.

    Raises
    ------
    ValidationError
        If ``months`` is outside [1, 360] or an action payload is malformed.
    """
    parsed = parse_actions(actions)
    try:
        return SimulationRequest(months=months, actions=[a.model_dump() for a in parsed])
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid simulation request: {e}") from e


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class SimulationService:
    """Run and reset simulations against a ``SimulationStore``."""

    def __init__(self, store: SimulationStore):
        self.store = store
        # One lock per user id seen; never pruned.
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    async def reset(self, user_id: str) -> None:
        """Restore original balances and clear simulation ledgers."""
        async with self._lock(user_id):
            await self._reset(user_id)

    async def _reset(self, user_id: str) -> None:
        try:
            await self.store.reset_to_baseline(user_id)
        except FinSimError:
            raise
        except Exception as e:
            raise PersistenceFailure(f"Reset failed for user {user_id!r}: {e}") from e
        logger.info("Reset user %s to baseline", user_id)

    async def _load(self, user_id: str) -> FinancialProfile:
        try:
            return await self.store.load_profile(user_id)
        except FinSimError:
            raise
        except Exception as e:
            raise PersistenceFailure(f"Could not load data for user {user_id!r}: {e}") from e

    async def run(
        self,
        user_id: str,
        request: Union[SimulationRequest, Mapping, None] = None,
    ) -> SimulationResult:
        """
        Reset, simulate and write back for ``user_id``.

        Parameters
        ----------
        user_id : str
            Owner of the data.
        request : SimulationRequest or dict, optional
            Horizon and actions. Defaults to 12 months with no actions.

        Raises
        ------
        ValidationError
            Bad horizon or actions; raised before the store is touched.
        DataUnavailableError
            The store has no data for ``user_id``.
        PersistenceFailure
            Writing results failed. ``e.result`` holds the computed result.
        """
        request = _coerce_request(request)

        async with self._lock(user_id):
            await self._reset(user_id)
            profile = await self._load(user_id)

            result, state = simulate(profile, request.months, request.actions)

            payload = build_write_back(user_id, state, result)
            try:
                await self.store.write_back(payload)
            except Exception as e:
                logger.error("Write-back failed for user %s: %s", user_id, e)
                raise PersistenceFailure(
                    f"Could not persist simulation for user {user_id!r}: {e}",
                    result=result,
                ) from e
        return result


def _coerce_request(request: Union[SimulationRequest, Mapping, None]) -> SimulationRequest:
    if request is None:
        return SimulationRequest()
    if isinstance(request, SimulationRequest):
        # Actions are re-validated in case the request was built without parsing.
        return build_request(request.months, request.actions)
    data = dict(request)
    return build_request(data.get("months", SimulationRequest().months), data.get("actions") or [])
