"""
Behavioural model of a single compute cell.

Next-state rule, evaluated from the pre-tick state:

    clear            -> accumulator = 0
    load (no clear)  -> accumulator held
    otherwise        -> accumulator += activation_in * weight_in

The passthrough registers always latch ``weight_in`` and ``activation_in``,
forwarding operands one grid hop per tick.
"""

from dataclasses import dataclass

from ..arith import mac


@dataclass(frozen=True)
class CellState:
    """Registers owned by one cell."""

    accumulator: int = 0
    weight_out: int = 0
    activation_out: int = 0


@dataclass(frozen=True)
class CellInputs:
    """Values sampled by one cell during a tick."""

    weight_in: int = 0
    activation_in: int = 0
    load: bool = False
    clear: bool = False


RESET_CELL = CellState()


def next_cell_state(state: CellState, inputs: CellInputs, bits: int) -> CellState:
    """Post-tick registers of a cell. ``state`` is not modified."""
    if inputs.clear:
        accumulator = 0
    elif inputs.load:
        accumulator = state.accumulator
    else:
        accumulator = mac(state.accumulator, inputs.activation_in, inputs.weight_in, bits)

    return CellState(
        accumulator=accumulator,
        weight_out=inputs.weight_in,
        activation_out=inputs.activation_in,
    )


def result_out(state: CellState, carry_in: int, carry_enable: bool) -> int:
    """Carry-chain output: the upstream result when enabled, else own accumulator."""
    return carry_in if carry_enable else state.accumulator
