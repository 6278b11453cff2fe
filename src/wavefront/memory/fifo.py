"""
BoundedQueue - Circular word buffer with occupancy counter.

The queue accepts at most one operation per clock:

    write valid = write & ~read & ~full
    read valid  = read & ~write & ~empty

Asserting read and write together is a mutual-exclusion no-op: neither
pointer moves and the output carries no data that cycle. This is the
queue's contract, not an error, and it is deliberately not a same-cycle
pass-through.

Timing (depth=4):

    Cycle 0: write=1, data_in=100     -> slot 0 <= 100, count 0 -> 1
    Cycle 1: read=1                   -> data_out <= 100, data_valid <= 1
    Cycle 2: read=1, write=1          -> no-op, data_valid <= 0
    Cycle 3: read=1                   -> empty, data_valid <= 0

The output pair (data_out, data_valid) is registered: it reports the read
performed on the previous clock edge. data_valid low is the "no valid data"
sentinel; data_out is held at zero alongside it but zero is an ordinary
word value when data_valid is high.

The reset input has priority over read/write. The status outputs also go to
their reset values combinationally while reset is high, so a reset asserted
between clock edges is visible before the next edge.
"""

from amaranth import Array, Module, Mux, Signal, unsigned
from amaranth.lib.wiring import Component, In, Out

from ..config import WavefrontConfig


class BoundedQueue(Component):
    """
    Bounded circular queue.

    Ports:
        reset: Reset (priority over read/write)
        write: Write request
        read: Read request
        data_in: Word to store on a valid write

        data_out: Word returned by the previous valid read (0 otherwise)
        data_valid: data_out holds a real word
        empty: No stored words
        full: All slots occupied
        count: Occupancy in [0, fifo_depth]

    Parameters:
        config: WavefrontConfig with fifo_depth and word_bits
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config

        super().__init__(
            {
                # Inputs
                "reset": In(1),
                "write": In(1),
                "read": In(1),
                "data_in": In(unsigned(config.word_bits)),
                # Outputs
                "data_out": Out(unsigned(config.word_bits)),
                "data_valid": Out(1),
                "empty": Out(1),
                "full": Out(1),
                "count": Out(unsigned(config.fifo_count_bits)),
            }
        )

        # Internal registers, exposed for simulation probes
        depth = config.fifo_depth
        self.slots = [Signal(config.word_bits, name=f"slot_{i}") for i in range(depth)]
        self.write_index = Signal(range(max(depth, 2)), name="write_index")
        self.read_index = Signal(range(max(depth, 2)), name="read_index")
        self.occupancy = Signal(config.fifo_count_bits, name="occupancy")

    def elaborate(self, _platform):
        m = Module()
        cfg = self.config
        depth = cfg.fifo_depth

        storage = Array(self.slots)
        wr_ptr = self.write_index
        rd_ptr = self.read_index
        occupancy = self.occupancy

        data_reg = Signal(cfg.word_bits, name="data_reg")
        valid_reg = Signal(name="valid_reg")

        # =================================================================
        # Status and operation validity
        # =================================================================
        is_empty = Signal(name="is_empty")
        is_full = Signal(name="is_full")
        do_write = Signal(name="do_write")
        do_read = Signal(name="do_read")

        m.d.comb += [
            is_empty.eq(occupancy == 0),
            is_full.eq(occupancy == depth),
            do_write.eq(self.write & ~self.read & ~is_full),
            do_read.eq(self.read & ~self.write & ~is_empty),
        ]

        def advance(ptr):
            return Mux(ptr == depth - 1, 0, ptr + 1)

        # =================================================================
        # Register Update Logic
        # =================================================================
        with m.If(self.reset):
            m.d.sync += [
                wr_ptr.eq(0),
                rd_ptr.eq(0),
                occupancy.eq(0),
                data_reg.eq(0),
                valid_reg.eq(0),
            ]
            m.d.sync += [slot.eq(0) for slot in self.slots]

        with m.Elif(do_write):
            m.d.sync += [
                storage[wr_ptr].eq(self.data_in),
                wr_ptr.eq(advance(wr_ptr)),
                occupancy.eq(occupancy + 1),
                data_reg.eq(0),
                valid_reg.eq(0),
            ]

        with m.Elif(do_read):
            m.d.sync += [
                data_reg.eq(storage[rd_ptr]),
                valid_reg.eq(1),
                rd_ptr.eq(advance(rd_ptr)),
                occupancy.eq(occupancy - 1),
            ]

        with m.Else():
            # Idle, blocked, or simultaneous read+write
            m.d.sync += [
                data_reg.eq(0),
                valid_reg.eq(0),
            ]

        # =================================================================
        # Outputs (reset overrides immediately)
        # =================================================================
        m.d.comb += [
            self.data_out.eq(Mux(self.reset, 0, data_reg)),
            self.data_valid.eq(valid_reg & ~self.reset),
            self.empty.eq(is_empty | self.reset),
            self.full.eq(is_full & ~self.reset),
            self.count.eq(Mux(self.reset, 0, occupancy)),
        ]

        return m
