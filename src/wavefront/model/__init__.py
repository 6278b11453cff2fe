"""
Behavioural (golden) models.

Pure-Python, cycle-level counterparts of the RTL components. Each model
computes a complete next state from the pre-tick state and swaps it in
atomically, so they double as reference models for the Amaranth designs:

- QueueModel: bounded circular queue with occupancy counter
- next_cell_state / result_out: compute cell rules
- EngineModel: size x size systolic engine with input skew and carry chain
"""

from .cell import CellInputs, CellState, next_cell_state, result_out
from .engine import EngineInputs, EngineModel
from .queue import QueueModel, QueueOutputs, QueueState, next_queue_state

__all__ = [
    "CellInputs",
    "CellState",
    "EngineInputs",
    "EngineModel",
    "QueueModel",
    "QueueOutputs",
    "QueueState",
    "next_cell_state",
    "next_queue_state",
    "result_out",
]
