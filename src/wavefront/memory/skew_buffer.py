"""
SkewBuffer - Triangular delay lines that turn boundary vectors into a wavefront.

The engine receives one activation per row and one weight per column on
every clock. For an (activation, weight) pair injected on the same clock to
meet in cell (i, j), activation lane i must be delayed i clocks and weight
lane j must be delayed j clocks:

          Lane 0 ───→ [      ] ──────────→ out_0
          Lane 1 ───→ [REG   ] ──────────→ out_1
          Lane 2 ───→ [REG][REG] ────────→ out_2
          Lane 3 ───→ [REG][REG][REG] ───→ out_3

Each operand then moves one cell per clock inside the grid, so the pair
injected on clock t reaches cell (i, j) on clock t + i + j. The set of cells
busy on a given clock is a diagonal band: the wavefront.
"""

from amaranth import Module, Signal, unsigned
from amaranth.lib.wiring import Component, In, Out


class SkewBuffer(Component):
    """
    Skew buffer for one edge of the engine.

    Ports:
        reset: Clear all delay registers
        in_data_0..N: Boundary words, all sampled on the same clock
        out_data_0..N: Lane i output, delayed by i clocks

    Parameters:
        num_lanes: Number of lanes (engine rows or columns)
        data_width: Width of each word in bits
        name_prefix: Prefix for register names ("act" or "weight")
    """

    def __init__(self, num_lanes: int, data_width: int, name_prefix: str = ""):
        self.num_lanes = num_lanes
        self.data_width = data_width
        self.name_prefix = name_prefix

        ports = {"reset": In(1)}
        for i in range(num_lanes):
            ports[f"in_data_{i}"] = In(unsigned(data_width))
            ports[f"out_data_{i}"] = Out(unsigned(data_width))

        super().__init__(ports)

    def elaborate(self, _platform):
        m = Module()

        for lane in range(self.num_lanes):
            in_data = getattr(self, f"in_data_{lane}")
            out_data = getattr(self, f"out_data_{lane}")

            if lane == 0:
                m.d.comb += out_data.eq(in_data)
                continue

            pipe = [
                Signal(self.data_width, name=f"{self.name_prefix}_skew_{lane}_{stage}")
                for stage in range(lane)
            ]

            with m.If(self.reset):
                m.d.sync += [reg.eq(0) for reg in pipe]
            with m.Else():
                m.d.sync += pipe[0].eq(in_data)
                m.d.sync += [pipe[s].eq(pipe[s - 1]) for s in range(1, lane)]

            m.d.comb += out_data.eq(pipe[-1])

        return m
