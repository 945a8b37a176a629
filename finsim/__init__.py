"""
FinSim — Monthly Personal Finance Simulator

Projects a household's income, expenses, loans and investments forward
month by month under scheduled what-if actions, and scores credit health
at every month boundary.

Modules
-------
- amortization : Level loan payments and payoff schedules
- config       : Persisted record schemas, simulation request, settings
- state        : Mutable run state and the profile loader
- actions      : Month-scheduled interventions and the scheduler
- credit       : Seven-component credit score model
- stepper      : One month of cash flows, servicing and growth
- results      : Result assembly and the write-back payload
- simulation   : Engine and the reset/run service
- persistence  : Store protocol, in-memory and JSON-file stores
- serialization: JSON documents for stores, results and actions

"""

from .config import FinancialProfile, SimulationRequest
from .simulation import SimulationEngine, SimulationService, simulate
from .results import SimulationResult
from .persistence import InMemoryStore, JsonFileStore
from . import utils

__version__ = "0.1.0"
