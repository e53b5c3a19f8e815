"""
Debates module.

Handles debate orchestration, the debate store, live analytics, and the
observer channel.

Public API:
- IDebateService: Interface for debate operations
- DebateService: In-process implementation
- PhaseOrchestrator: Drives one debate through its phases
- DebateRepository: The debate store
- DebateWriter: Serialized store mutation and publishing
- DebateReconstructor: Folds channel messages back into a Debate
- Debate, DebateMessage: The aggregate and its wire messages
"""

from .interfaces import IDebateService
from .models import (
    Debate,
    DebateAgent,
    DebateListItem,
    DebateListResponse,
    DebateMessage,
    DebateMessageType,
    DebatePhase,
    FinalScore,
    Side,
    SubscriptionTokenResponse,
    TriggerDebateRequest,
    TriggerDebateResponse,
)
from .exceptions import (
    DebateError,
    UnknownDebateError,
    DebateAlreadyCompletedError,
    PhaseTransitionError,
    PreconditionError,
    PhaseTimeoutError,
    GenerationError,
)
from .orchestrator import OrchestratorSettings, PhaseOrchestrator
from .publisher import EventPublisher
from .reconstructor import DebateReconstructor
from .repository import DebateRepository
from .service import DebateService
from .writer import DebateWriter

__all__ = [
    # Interface
    "IDebateService",
    "DebateService",
    # Components
    "PhaseOrchestrator",
    "OrchestratorSettings",
    "DebateRepository",
    "DebateWriter",
    "EventPublisher",
    "DebateReconstructor",
    # Models
    "Debate",
    "DebateAgent",
    "DebateListItem",
    "DebateListResponse",
    "DebateMessage",
    "DebateMessageType",
    "DebatePhase",
    "FinalScore",
    "Side",
    "SubscriptionTokenResponse",
    "TriggerDebateRequest",
    "TriggerDebateResponse",
    # Exceptions
    "DebateError",
    "UnknownDebateError",
    "DebateAlreadyCompletedError",
    "PhaseTransitionError",
    "PreconditionError",
    "PhaseTimeoutError",
    "GenerationError",
]
