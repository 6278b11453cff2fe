"""
Sequencing for full engine runs and queue traffic.

A matrix-multiply run is a fixed schedule of per-tick boundary inputs:

    LOAD     k ticks      operands injected, load=0, clear=0
    SETTLE   2*(n-1)      zero operands while the wavefront reaches cell (n-1, n-1)
    READOUT  n ticks      load=1, carry walk from the highest column down
    CLEAR    1 tick       clear=1

The same schedule drives either the behavioural model (``run_model``) or
the Amaranth RTL inside an ``amaranth.sim`` testbench (``drive_engine``),
so both produce a readout in the same shape: readout[step][row].
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, auto

import numpy as np

from ..config import WavefrontConfig
from ..model.engine import EngineInputs, EngineModel
from ..model.queue import QueueModel, QueueOutputs
from .stimulus import QueueOp


class Phase(Enum):
    """Phase of a matrix-multiply run."""

    LOAD = auto()
    SETTLE = auto()
    READOUT = auto()
    CLEAR = auto()


@dataclass(frozen=True)
class ScheduledTick:
    """One tick of a schedule."""

    phase: Phase
    inputs: EngineInputs


def carry_walk(step: int, size: int) -> tuple[bool, ...]:
    """
    Carry-enable vector for readout step ``step``.

    Step 0 asserts nothing, so each row shows its last column. Every later
    step additionally asserts the next lower column, so the carry chain
    bypasses one more cell and the row shows column size-1-step.

    Column 0 is never asserted: on the last step (size-1) it is the only
    clear column, so its accumulator reaches the row output. Asserting it
    as well would select the zero tied to the start of the chain.
    """
    return tuple(col >= size - step for col in range(size))


def matmul_schedule(
    config: WavefrontConfig,
    activations: np.ndarray,
    weights: np.ndarray,
) -> list[ScheduledTick]:
    """
    Build the complete tick schedule for one contraction.

    Args:
        config: Engine configuration
        activations: k x size, row t injected on tick t
        weights: k x size, row t injected on tick t
    """
    n = config.array_size
    activations = np.asarray(activations)
    weights = np.asarray(weights)
    if activations.shape != weights.shape or activations.ndim != 2 or activations.shape[1] != n:
        raise ValueError(
            f"operands must both be k x {n}, got {activations.shape} and {weights.shape}"
        )

    schedule = []
    for a, w in zip(activations, weights, strict=True):
        inputs = EngineInputs(
            activations=tuple(int(v) for v in a),
            weights=tuple(int(v) for v in w),
        )
        schedule.append(ScheduledTick(Phase.LOAD, inputs))

    for _ in range(config.settle_ticks):
        schedule.append(ScheduledTick(Phase.SETTLE, EngineInputs.idle(n)))

    for step in range(config.readout_ticks):
        inputs = EngineInputs.idle(n, load=True, carry_enable=carry_walk(step, n))
        schedule.append(ScheduledTick(Phase.READOUT, inputs))

    schedule.append(ScheduledTick(Phase.CLEAR, EngineInputs.idle(n, clear=True)))
    return schedule


def run_model(
    model: EngineModel,
    activations: np.ndarray,
    weights: np.ndarray,
) -> list[list[int]]:
    """
    Execute a full run on the behavioural model.

    Returns:
        readout[step][row]; step k holds column size-1-k.
    """
    readout = []
    for tick in matmul_schedule(model.config, activations, weights):
        outputs = model.step(tick.inputs)
        if tick.phase is Phase.READOUT:
            readout.append(outputs)
    return readout


def readout_to_matrix(readout: Sequence[Sequence[int]], size: int) -> np.ndarray:
    """Reorder readout[step][row] into C[row][col]."""
    result = np.zeros((size, size), dtype=np.uint64)
    for step, values in enumerate(readout):
        for row, value in enumerate(values):
            result[row, size - 1 - step] = int(value)
    return result


# =============================================================================
# RTL drivers (amaranth.sim async testbench helpers)
# =============================================================================


def apply_engine_inputs(ctx, dut, inputs: EngineInputs) -> None:
    """Drive one tick's boundary signals onto a SystolicEngine."""
    n = dut.config.array_size
    carry = inputs.carry_enable or (False,) * n
    ctx.set(dut.reset, inputs.reset)
    ctx.set(dut.load, inputs.load)
    ctx.set(dut.clear, inputs.clear)
    for i in range(n):
        ctx.set(getattr(dut, f"in_act_{i}"), inputs.activations[i])
        ctx.set(getattr(dut, f"in_weight_{i}"), inputs.weights[i])
        ctx.set(getattr(dut, f"carry_en_{i}"), carry[i])


def sample_engine_outputs(ctx, dut) -> list[int]:
    """Read out_data_0..N of a SystolicEngine."""
    return [ctx.get(getattr(dut, f"out_data_{i}")) for i in range(dut.config.array_size)]


async def drive_engine(ctx, dut, schedule: Sequence[ScheduledTick]) -> list[list[int]]:
    """
    Run a schedule against a SystolicEngine in an async testbench.

    Outputs are sampled after the inputs are applied and before the clock
    edge, matching ``EngineModel.tick``.
    """
    readout = []
    for tick in schedule:
        apply_engine_inputs(ctx, dut, tick.inputs)
        if tick.phase is Phase.READOUT:
            readout.append(sample_engine_outputs(ctx, dut))
        await ctx.tick()
    apply_engine_inputs(ctx, dut, EngineInputs.idle(dut.config.array_size))
    return readout


def run_queue_model(model: QueueModel, ops: Sequence[QueueOp]) -> list[QueueOutputs]:
    """Apply queue traffic to the behavioural model, one op per tick."""
    return [
        model.tick(read=op.read, write=op.write, data_in=op.data_in, reset=op.reset)
        for op in ops
    ]


async def drive_queue(ctx, dut, ops: Sequence[QueueOp]) -> list[QueueOutputs]:
    """
    Apply queue traffic to a BoundedQueue in an async testbench.

    Outputs are sampled after each clock edge with the controls released,
    in the same form ``QueueModel.tick`` returns them.
    """
    observed = []
    for op in ops:
        ctx.set(dut.read, op.read)
        ctx.set(dut.write, op.write)
        ctx.set(dut.data_in, op.data_in)
        ctx.set(dut.reset, op.reset)
        await ctx.tick()
        ctx.set(dut.reset, 0)
        valid = ctx.get(dut.data_valid)
        observed.append(
            QueueOutputs(
                data_out=ctx.get(dut.data_out) if valid else None,
                empty=bool(ctx.get(dut.empty)),
                full=bool(ctx.get(dut.full)),
                occupancy=ctx.get(dut.count),
            )
        )
    ctx.set(dut.read, 0)
    ctx.set(dut.write, 0)
    return observed
