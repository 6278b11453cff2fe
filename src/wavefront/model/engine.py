"""
Behavioural model of the systolic engine.

The engine is a size x size grid of compute cells joined by three edge
buffers:

                 weight_edge[0][0]  weight_edge[0][1]
                        |                  |
    act_edge[0][0] --> [cell 0,0] ------> [cell 0,1] --> act_edge[0][2]
                        |                  |
    act_edge[1][0] --> [cell 1,0] ------> [cell 1,1] --> act_edge[1][2]
                        |                  |
                 weight_edge[2][0]  weight_edge[2][1]

    result_edge[i][0] = 0
    result_edge[i][j+1] = carry_enable[j] ? result_edge[i][j] : acc[i][j]
    dataOut[i] = result_edge[i][size]

Row 0 of ``weight_edge`` and column 0 of ``act_edge`` are the boundary
inputs after the input skew: activation lane i is delayed i ticks and
weight lane j is delayed j ticks, so an (activation, weight) pair injected
on tick t meets in cell (i, j) on tick t + i + j. This is the diagonal
wavefront.

Every tick first evaluates all edge buffers from the pre-tick registers,
then builds a complete new register set and swaps it in. Cell updates never
observe each other's post-tick values.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..arith import check_word
from ..config import WavefrontConfig
from .cell import RESET_CELL, CellInputs, CellState, next_cell_state, result_out


@dataclass(frozen=True)
class EngineInputs:
    """
    Boundary signals sampled by the engine on one tick.

    Attributes:
        activations: One word per row, entering at column 0
        weights: One word per column, entering at row 0
        load: Hold all accumulators
        clear: Zero all accumulators (wins over load)
        carry_enable: One bit per column selecting carry-in over accumulator
        reset: Reset control, sampled with priority
    """

    activations: tuple[int, ...]
    weights: tuple[int, ...]
    load: bool = False
    clear: bool = False
    carry_enable: tuple[bool, ...] = ()
    reset: bool = False

    @classmethod
    def idle(cls, size: int, **controls) -> "EngineInputs":
        """Zero operands with the given control values."""
        return cls(activations=(0,) * size, weights=(0,) * size, **controls)


class EngineModel:
    """
    Cycle-level systolic engine.

    Example:
        >>> engine = EngineModel(WavefrontConfig(array_size=2))
        >>> engine.tick([1, 2], [3, 4])
        [0, 0]
        >>> int(engine.accumulators()[0, 0])
        3
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config
        self.size = config.array_size
        self.cycle = 0
        self._init_state()

    def _init_state(self) -> None:
        n = self.size
        self.cells: list[list[CellState]] = [[RESET_CELL for _ in range(n)] for _ in range(n)]
        # Lane k holds k skew registers; index 0 is nearest the input
        self.act_skew: list[list[int]] = [[0] * lane for lane in range(n)]
        self.weight_skew: list[list[int]] = [[0] * lane for lane in range(n)]

    # -------------------------------------------------------------------------
    # Input validation
    # -------------------------------------------------------------------------
    def _vector(self, values: Sequence[int], name: str) -> tuple[int, ...]:
        if len(values) != self.size:
            raise ValueError(f"{name} must have {self.size} elements, got {len(values)}")
        return tuple(check_word(v, self.config.word_bits) for v in values)

    def _carry(self, carry_enable: Sequence[bool] | None) -> tuple[bool, ...]:
        if carry_enable is None or len(carry_enable) == 0:
            return (False,) * self.size
        if len(carry_enable) != self.size:
            raise ValueError(
                f"carry_enable must have {self.size} elements, got {len(carry_enable)}"
            )
        return tuple(bool(c) for c in carry_enable)

    # -------------------------------------------------------------------------
    # Edge buffers (combinational views of the pre-tick state)
    # -------------------------------------------------------------------------
    @staticmethod
    def _skew_out(pipes: list[list[int]], values: Sequence[int]) -> list[int]:
        return [values[lane] if lane == 0 else pipes[lane][-1] for lane in range(len(pipes))]

    @staticmethod
    def _shift_skew(pipes: list[list[int]], values: Sequence[int]) -> list[list[int]]:
        return [[values[lane]] + pipe[:-1] if pipe else [] for lane, pipe in enumerate(pipes)]

    def weight_edge(self, weights: Sequence[int] | None = None) -> list[list[int]]:
        """(size+1) x size buffer; row 0 is the skewed boundary, row size leaves the grid."""
        n = self.size
        weights = (0,) * n if weights is None else weights
        edge = [self._skew_out(self.weight_skew, weights)]
        for i in range(n):
            edge.append([self.cells[i][j].weight_out for j in range(n)])
        return edge

    def activation_edge(self, activations: Sequence[int] | None = None) -> list[list[int]]:
        """size x (size+1) buffer; column 0 is the skewed boundary, column size leaves the grid."""
        n = self.size
        activations = (0,) * n if activations is None else activations
        boundary = self._skew_out(self.act_skew, activations)
        return [
            [boundary[i]] + [self.cells[i][j].activation_out for j in range(n)] for i in range(n)
        ]

    def result_edge(self, carry_enable: Sequence[bool] | None = None) -> list[list[int]]:
        """size x (size+1) carry chain; column size is the engine output."""
        carry = self._carry(carry_enable)
        edge = []
        for i in range(self.size):
            row = [0]
            for j in range(self.size):
                row.append(result_out(self.cells[i][j], row[j], carry[j]))
            edge.append(row)
        return edge

    def data_out(self, carry_enable: Sequence[bool] | None = None) -> list[int]:
        """Row outputs for the given carry-enable vector."""
        return [row[self.size] for row in self.result_edge(carry_enable)]

    # -------------------------------------------------------------------------
    # Clocked behaviour
    # -------------------------------------------------------------------------
    def tick(
        self,
        activations: Sequence[int],
        weights: Sequence[int],
        load: bool = False,
        clear: bool = False,
        carry_enable: Sequence[bool] | None = None,
        reset: bool = False,
    ) -> list[int]:
        """
        Advance one clock tick.

        Args:
            activations: Boundary activation per row
            weights: Boundary weight per column
            load: Hold accumulators (readout)
            clear: Zero accumulators
            carry_enable: Per-column carry-enable bits (default all low)
            reset: Reset control, sampled with priority over everything else

        Returns:
            ``dataOut[size]`` as driven during this tick, i.e. from the
            pre-tick accumulators and this tick's carry-enable bits.
        """
        if reset:
            self.reset()
            self.cycle += 1
            return [0] * self.size

        activations = self._vector(activations, "activations")
        weights = self._vector(weights, "weights")
        carry = self._carry(carry_enable)

        n = self.size
        bits = self.config.word_bits

        outputs = self.data_out(carry)
        w_edge = self.weight_edge(weights)
        a_edge = self.activation_edge(activations)

        next_cells = [
            [
                next_cell_state(
                    self.cells[i][j],
                    CellInputs(
                        weight_in=w_edge[i][j],
                        activation_in=a_edge[i][j],
                        load=load,
                        clear=clear,
                    ),
                    bits,
                )
                for j in range(n)
            ]
            for i in range(n)
        ]
        next_act_skew = self._shift_skew(self.act_skew, activations)
        next_weight_skew = self._shift_skew(self.weight_skew, weights)

        # Commit all registers at once
        self.cells = next_cells
        self.act_skew = next_act_skew
        self.weight_skew = next_weight_skew
        self.cycle += 1
        return outputs

    def step(self, inputs: EngineInputs) -> list[int]:
        """Tick with a pre-built ``EngineInputs``."""
        return self.tick(
            inputs.activations,
            inputs.weights,
            load=inputs.load,
            clear=inputs.clear,
            carry_enable=inputs.carry_enable or None,
            reset=inputs.reset,
        )

    def reset(self) -> None:
        """Force the initial state immediately, outside the tick cadence."""
        self._init_state()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------
    def cell(self, row: int, col: int) -> CellState:
        return self.cells[row][col]

    def accumulators(self) -> np.ndarray:
        """Snapshot of every accumulator as a size x size array."""
        return np.array(
            [[c.accumulator for c in row] for row in self.cells],
            dtype=np.uint64,
        )

    def snapshot(self) -> "EngineModel":
        """Independent copy of the current state (for before/after checks)."""
        copy = EngineModel(self.config)
        copy.cells = [list(row) for row in self.cells]
        copy.act_skew = [list(p) for p in self.act_skew]
        copy.weight_skew = [list(p) for p in self.weight_skew]
        copy.cycle = self.cycle
        return copy

    def __repr__(self) -> str:
        return f"EngineModel({self.size}x{self.size}, cycle={self.cycle})"
