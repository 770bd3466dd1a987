"""Launch — state machine и интерфейсы окружения."""

from .collaborators import (
    Asset,
    Authorization,
    Clock,
    Custody,
    CustodyMove,
    FixedClock,
    InMemoryCustody,
    InMemoryStateStore,
    StateStore,
    StaticAuthorization,
)
from .state_machine import (
    DayAdvanced,
    LaunchConfig,
    LaunchCreated,
    LaunchStateMachine,
    PurchaseEvent,
    SellEvent,
    TransferEvent,
)

__all__ = [
    # Collaborators
    "Asset",
    "Clock",
    "Custody",
    "CustodyMove",
    "Authorization",
    "StateStore",
    "FixedClock",
    "InMemoryCustody",
    "StaticAuthorization",
    "InMemoryStateStore",
    # State machine
    "LaunchConfig",
    "LaunchStateMachine",
    "LaunchCreated",
    "DayAdvanced",
    "PurchaseEvent",
    "SellEvent",
    "TransferEvent",
]
