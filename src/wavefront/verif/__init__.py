"""
Verification collaborators.

- StimulusGenerator: seeded random operands and queue traffic
- Scoreboard / QueueScoreboard: independent expected-value tracking
- QueueChecker / EngineChecker: per-tick protocol invariants
- driver: run schedules on the models or on the RTL under amaranth.sim
"""

from .driver import (
    Phase,
    ScheduledTick,
    carry_walk,
    drive_engine,
    drive_queue,
    matmul_schedule,
    readout_to_matrix,
    run_model,
    run_queue_model,
)
from .properties import (
    CheckedEngine,
    CheckedQueue,
    EngineChecker,
    ProtocolViolation,
    QueueChecker,
)
from .scoreboard import QueueScoreboard, Scoreboard
from .stimulus import QueueOp, StimulusGenerator

__all__ = [
    "CheckedEngine",
    "CheckedQueue",
    "EngineChecker",
    "Phase",
    "ProtocolViolation",
    "QueueChecker",
    "QueueOp",
    "QueueScoreboard",
    "ScheduledTick",
    "Scoreboard",
    "StimulusGenerator",
    "carry_walk",
    "drive_engine",
    "drive_queue",
    "matmul_schedule",
    "readout_to_matrix",
    "run_model",
    "run_queue_model",
]
