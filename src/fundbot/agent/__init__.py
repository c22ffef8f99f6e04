"""
fundbot/agent

Query pipeline for fundbot:
- orchestrator.py: TurnOrchestrator (per-query state machine)
- operations.py: OperationDispatcher (the three backing operations)
- formatter.py: rendering of OperationResult values
"""

from .operations import OperationDispatcher  # noqa: F401
from .orchestrator import TurnOrchestrator, TurnState  # noqa: F401
