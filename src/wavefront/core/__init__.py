"""
Core compute components.

- ComputeCell: multiply-accumulate unit with passthrough registers
- SystolicEngine: size x size grid of ComputeCells with skewed boundary
  injection and a carry-chain readout
"""

from .cell import ComputeCell
from .engine import SystolicEngine

__all__ = ["ComputeCell", "SystolicEngine"]
