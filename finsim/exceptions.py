"""
Custom exceptions for FinSim.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all FinSim modules. All exceptions inherit from FinSimError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
FinSimError (base)
├── ConfigurationError - Invalid configuration or parameters
├── ValidationError - Rejected inputs (horizon, action payloads)
├── DataUnavailableError - User data could not be loaded
└── PersistenceFailure - Store read/write failures

Notes
-----
The simulation core itself never raises for unknown entity references:
actions pointing at deleted loans or income streams are absorbed as
no-ops. Everything here is raised at the edges (request validation,
loading, write-back).

Usage
-----
>>> from finsim.exceptions import ValidationError, PersistenceFailure
>>>
>>> try:
...     result = asyncio.run(service.run(user_id, request))
... except PersistenceFailure as e:
...     timeline = e.result.timeline  # computed result is not lost
"""

from __future__ import annotations

from typing import Any, Optional


class FinSimError(Exception):
    """
    Base exception for all FinSim errors.

    Examples
    --------
    >>> try:
    ...     asyncio.run(service.run("demo", request))
    ... except FinSimError as e:
    ...     logger.error(f"Simulation failed: {e}")
    """
    pass


class ConfigurationError(FinSimError):
    """
    Invalid configuration or parameters.

    Raised when a data file or settings object cannot be interpreted, such as:
    - A JSON store without a "users" mapping
    - Persisted records that fail validation

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Data document must contain a 'users' mapping."
    ... )
    """
    pass


class ValidationError(FinSimError):
    """
    Input validation failures.

    Raised before the core runs when a request is malformed:
    - Horizon outside [1, 360] months
    - Action payloads missing required fields or with an unknown type

    Examples
    --------
    >>> raise ValidationError(
    ...     "months must be between 1 and 360, got 0."
    ... )
    """
    pass


class DataUnavailableError(FinSimError):
    """
    User data could not be loaded.

    Raised when the store has no data for the requested user. Empty
    collections (no loans, no income) are not an error.

    Examples
    --------
    >>> raise DataUnavailableError("No financial profile for user 'ghost'.")
    """
    pass


class PersistenceFailure(FinSimError):
    """
    Store failure at the write-back boundary.

    The simulation result computed before the failure is attached as
    ``result`` so callers can still report or retry the write.

    Parameters
    ----------
    message : str
        Human-readable description.
    result : SimulationResult, optional
        The computed result that could not be persisted.
    """

    def __init__(self, message: str, result: Optional[Any] = None) -> None:
        super().__init__(message)
        self.result = result
