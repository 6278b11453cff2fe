"""
ComputeCell - The multiply-accumulate unit of the systolic engine.

Each cell owns one accumulator and two passthrough registers:

    acc        <= clear ? 0 : load ? acc : acc + (in_act * in_weight)
    out_weight <= in_weight      (to the cell below)
    out_act    <= in_act         (to the cell on the right)

The product is 2 * word_bits wide and is narrowed to word_bits before it
is added, so both the product and the sum wrap around.

The result output is combinational and forms the carry chain used for
readout:

    out_result = carry_enable ? in_result : acc

With carry_enable high the cell forwards the partial result arriving from
its left neighbour instead of exposing its own accumulator.
"""

from amaranth import Module, Mux, Signal, unsigned
from amaranth.lib.wiring import Component, In, Out

from ..config import WavefrontConfig


class ComputeCell(Component):
    """
    Compute cell - accumulates activation * weight and forwards operands.

    Ports:
        reset: Reset, zeroes every register
        load: Hold the accumulator (readout)
        clear: Zero the accumulator (wins over load)
        carry_enable: Select in_result over acc on out_result
        in_weight: Weight from the cell above (or the top boundary)
        in_act: Activation from the cell on the left (or the left boundary)
        in_result: Partial result from the cell on the left

        out_weight: Registered copy of in_weight
        out_act: Registered copy of in_act
        out_result: Carry-chain output
        acc: Accumulator register

    Parameters:
        config: WavefrontConfig with word_bits
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config
        width = config.word_bits

        super().__init__(
            {
                # Inputs
                "reset": In(1),
                "load": In(1),
                "clear": In(1),
                "carry_enable": In(1),
                "in_weight": In(unsigned(width)),
                "in_act": In(unsigned(width)),
                "in_result": In(unsigned(width)),
                # Outputs
                "out_weight": Out(unsigned(width)),
                "out_act": Out(unsigned(width)),
                "out_result": Out(unsigned(width)),
                "acc": Out(unsigned(width)),
            }
        )

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config

        accumulator = Signal(cfg.word_bits, name="accumulator")

        # =================================================================
        # Multiply-Accumulate Computation
        # =================================================================
        product = Signal(cfg.product_bits, name="product")
        m.d.comb += product.eq(self.in_act * self.in_weight)

        narrowed = Signal(cfg.word_bits, name="narrowed")
        m.d.comb += narrowed.eq(product[: cfg.word_bits])

        # =================================================================
        # Register Update Logic
        # =================================================================
        with m.If(self.reset):
            m.d.sync += [
                accumulator.eq(0),
                self.out_weight.eq(0),
                self.out_act.eq(0),
            ]
        with m.Else():
            with m.If(self.clear):
                m.d.sync += accumulator.eq(0)
            with m.Elif(~self.load):
                m.d.sync += accumulator.eq(accumulator + narrowed)

            # Pass-through registers latch unconditionally
            m.d.sync += [
                self.out_weight.eq(self.in_weight),
                self.out_act.eq(self.in_act),
            ]

        # =================================================================
        # Output Selection
        # =================================================================
        m.d.comb += [
            self.acc.eq(accumulator),
            self.out_result.eq(Mux(self.carry_enable, self.in_result, accumulator)),
        ]

        return m
