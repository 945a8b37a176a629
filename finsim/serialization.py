"""
Serialization module for FinSim persistence.

Purpose
-------
JSON serialization for the data FinSim stores and exchanges:

- User ledgers (records, ledgers and profile summaries) for ``JsonFileStore``
- Simulation results (timeline + credit history) for export
- Action lists read by the CLI

Design Principles
-----------------
- Type-safe: documents are validated through the Pydantic record models
- Human-readable: indented JSON with the camelCase keys the records alias to
- Versioned: every document carries ``schema_version``; a mismatch warns

Example
-------
>>> from pathlib import Path
>>> save_ledgers({"demo": UserLedger(profile=demo_profile())}, Path("data.json"))
>>> users = load_ledgers(Path("data.json"))
>>> list(users)
['demo']
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from .config import UserLedger
from .exceptions import ConfigurationError

__all__ = [
    "SCHEMA_VERSION",
    "ledgers_to_dict",
    "ledgers_from_dict",
    "save_ledgers",
    "load_ledgers",
    "save_result",
    "load_actions",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _check_version(data: Dict[str, Any], path: Path) -> None:
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"{path} schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


# ---------------------------------------------------------------------------
# Ledgers
# ---------------------------------------------------------------------------

def ledgers_to_dict(users: Dict[str, UserLedger]) -> Dict[str, Any]:
    """
    Convert user ledgers to a JSON-ready document.

    Parameters
    ----------
    users : dict of str to UserLedger
        Ledgers keyed by user id.

    Returns
    -------
    dict
        ``{"schema_version": ..., "users": {user_id: ledger}}``
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "users": {
            user_id: ledger.model_dump(mode="json", by_alias=True)
            for user_id, ledger in users.items()
        },
    }


def ledgers_from_dict(data: Dict[str, Any]) -> Dict[str, UserLedger]:
    """
    Rebuild user ledgers from a document produced by ``ledgers_to_dict``.

    Raises
    ------
    ConfigurationError
        If the document has no ``users`` mapping or a ledger fails validation.
    """
    users = data.get("users")
    if not isinstance(users, dict):
        raise ConfigurationError("Data document must contain a 'users' mapping.")
    try:
        return {str(user_id): UserLedger.model_validate(ledger) for user_id, ledger in users.items()}
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid user ledger: {e}") from e


def save_ledgers(users: Dict[str, UserLedger], path: Path) -> None:
    """
    Write user ledgers to ``path`` as JSON.

    Examples
    --------
    >>> save_ledgers(store.users, Path("finsim-data.json"))
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(ledgers_to_dict(users), f, indent=2)


def load_ledgers(path: Path) -> Dict[str, UserLedger]:
    """
    Read user ledgers from a JSON file written by ``save_ledgers``.

    Examples
    --------
    >>> users = load_ledgers(Path("finsim-data.json"))
    """
    with open(path, "r") as f:
        data = json.load(f)
    _check_version(data, path)
    return ledgers_from_dict(data)


# ---------------------------------------------------------------------------
# Results and actions
# ---------------------------------------------------------------------------

def save_result(result, path: Path) -> None:
    """Write a ``SimulationResult`` (camelCase JSON) to ``path``."""
    payload = {"schema_version": SCHEMA_VERSION}
    payload.update(result.to_dict())
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def load_actions(path: Path) -> List[Dict[str, Any]]:
    """
    Read raw action payloads from JSON.

    Accepts either a bare list or an object with an ``actions`` list (the
    shape of a saved scenario). Payloads are parsed later by
    ``finsim.actions.parse_actions``.
    """
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("actions", [])
    if not isinstance(data, list):
        raise ConfigurationError(f"{path} must contain a list of actions.")
    return data
