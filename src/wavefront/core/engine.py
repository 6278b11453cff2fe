"""
SystolicEngine - A size x size mesh of compute cells with serial readout.

The engine accumulates C[i][j] += act[i] * weight[j] in cell (i, j) on
every clock while load and clear are low. Operands enter at the boundary
through skew buffers and then hop one cell per clock:

- Activations: enter row i at column 0, flow left to right
- Weights: enter column j at row 0, flow top to bottom
- Results: leave each row at column size-1 through the carry chain

Example 2x2 engine:

             in_weight_0      in_weight_1
                  |                |
               [skew 0]         [skew 1]
                  |                |
in_act_0 -[skew]-> [cell 0,0] ---> [cell 0,1] ---> out_act_0
                  |   r -------------> r  ----------> out_data_0
                  |                |
in_act_1 -[skew]-> [cell 1,0] ---> [cell 1,1] ---> out_act_1
                  |   r -------------> r  ----------> out_data_1
                  |                |
             out_weight_0     out_weight_1

Edge buffers (all combinational wiring):

    weight_edge[0][j]   = skewed in_weight_j
    weight_edge[i+1][j] = cell(i, j).out_weight
    act_edge[i][0]      = skewed in_act_i
    act_edge[i][j+1]    = cell(i, j).out_act
    result_edge[i][0]   = 0
    result_edge[i][j+1] = cell(i, j).out_result
    out_data_i          = result_edge[i][size]

Operating sequence for one K-long contraction:

1. Load:    K clocks of boundary vectors, load=0, clear=0
2. Settle:  2*(size-1) clocks of zero vectors while the wavefront drains
3. Readout: size clocks with load=1; on readout step k the carry_en bits of
            columns size-k .. size-1 are high, so out_data_i shows column
            size-1-k of row i (last column first)
4. Clear:   one clock with clear=1
"""

from amaranth import Module, Mux, Signal, unsigned
from amaranth.lib.wiring import Component, In, Out

from ..config import WavefrontConfig
from ..memory.skew_buffer import SkewBuffer
from .cell import ComputeCell


class SystolicEngine(Component):
    """
    Systolic engine - grid of ComputeCells with edge buffers and carry chain.

    Ports:
        reset: Reset (priority over every other control)
        load: Hold all accumulators (broadcast)
        clear: Zero all accumulators (broadcast)
        carry_en_0..N: Per-column carry enable
        in_act_0..N: Boundary activations (one per row)
        in_weight_0..N: Boundary weights (one per column)

        out_data_0..N: Row outputs from the carry chain
        out_act_0..N: Activations leaving the right edge
        out_weight_0..N: Weights leaving the bottom edge

    Parameters:
        config: WavefrontConfig with array_size and word_bits
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config
        n = config.array_size
        width = config.word_bits

        ports = {
            "reset": In(1),
            "load": In(1),
            "clear": In(1),
        }

        for j in range(n):
            ports[f"carry_en_{j}"] = In(1)

        for i in range(n):
            ports[f"in_act_{i}"] = In(unsigned(width))
        for j in range(n):
            ports[f"in_weight_{j}"] = In(unsigned(width))

        for i in range(n):
            ports[f"out_data_{i}"] = Out(unsigned(width))
            ports[f"out_act_{i}"] = Out(unsigned(width))
        for j in range(n):
            ports[f"out_weight_{j}"] = Out(unsigned(width))

        super().__init__(ports)

        # Grid built up front so simulations can probe individual cells
        self.cells = [[ComputeCell(config) for _ in range(n)] for _ in range(n)]
        self.act_skew = SkewBuffer(n, width, "act")
        self.weight_skew = SkewBuffer(n, width, "weight")

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config
        n = cfg.array_size
        width = cfg.word_bits
        cells = self.cells

        m.submodules.act_skew = act_skew = self.act_skew
        m.submodules.weight_skew = weight_skew = self.weight_skew

        for r in range(n):
            for c in range(n):
                m.submodules[f"cell_{r}_{c}"] = cells[r][c]

        # =================================================================
        # Boundary Skew
        # =================================================================
        m.d.comb += [
            act_skew.reset.eq(self.reset),
            weight_skew.reset.eq(self.reset),
        ]
        for i in range(n):
            m.d.comb += getattr(act_skew, f"in_data_{i}").eq(getattr(self, f"in_act_{i}"))
        for j in range(n):
            m.d.comb += getattr(weight_skew, f"in_data_{j}").eq(getattr(self, f"in_weight_{j}"))

        # =================================================================
        # Edge Buffers
        # =================================================================
        weight_edge = [
            [Signal(width, name=f"weight_edge_{i}_{j}") for j in range(n)] for i in range(n + 1)
        ]
        act_edge = [
            [Signal(width, name=f"act_edge_{i}_{j}") for j in range(n + 1)] for i in range(n)
        ]
        result_edge = [
            [Signal(width, name=f"result_edge_{i}_{j}") for j in range(n + 1)] for i in range(n)
        ]

        # Row/column 0 driven by the boundary
        for j in range(n):
            m.d.comb += weight_edge[0][j].eq(getattr(weight_skew, f"out_data_{j}"))
        for i in range(n):
            m.d.comb += [
                act_edge[i][0].eq(getattr(act_skew, f"out_data_{i}")),
                result_edge[i][0].eq(0),
            ]

        # =================================================================
        # Cell Wiring
        # =================================================================
        for r in range(n):
            for c in range(n):
                cell = cells[r][c]
                m.d.comb += [
                    # Inputs from the edge buffers
                    cell.in_weight.eq(weight_edge[r][c]),
                    cell.in_act.eq(act_edge[r][c]),
                    cell.in_result.eq(result_edge[r][c]),
                    # Outputs into the next edge slot
                    weight_edge[r + 1][c].eq(cell.out_weight),
                    act_edge[r][c + 1].eq(cell.out_act),
                    result_edge[r][c + 1].eq(cell.out_result),
                    # Control broadcast
                    cell.reset.eq(self.reset),
                    cell.load.eq(self.load),
                    cell.clear.eq(self.clear),
                    cell.carry_enable.eq(getattr(self, f"carry_en_{c}")),
                ]

        # =================================================================
        # Outputs - row n / column n of the edge buffers
        # =================================================================
        for i in range(n):
            m.d.comb += [
                getattr(self, f"out_data_{i}").eq(Mux(self.reset, 0, result_edge[i][n])),
                getattr(self, f"out_act_{i}").eq(act_edge[i][n]),
            ]
        for j in range(n):
            m.d.comb += getattr(self, f"out_weight_{j}").eq(weight_edge[n][j])

        return m
