"""
Behavioural model of the bounded queue.

The queue is a circular buffer with an occupancy counter. Each tick applies
at most one of {write, read}:

    write valid  <=>  write & ~read & ~full
    read valid   <=>  read & ~write & ~empty

Asserting both controls in one tick is a mutual-exclusion no-op: neither
operation proceeds and the output carries no data. Blocked operations
(write while full, read while empty) are silent no-ops as well.

The output of a tick is ``None`` whenever no word was read. ``None`` is the
"no valid data" sentinel and is never confused with the word ``0``.

Every tick builds the complete next state from the pre-tick state and then
replaces the current state in one assignment, so no part of the update can
observe a value already written in the same tick.
"""

from dataclasses import dataclass, replace

from ..arith import check_word
from ..config import WavefrontConfig


@dataclass(frozen=True)
class QueueState:
    """
    Complete register state of the queue.

    Attributes:
        storage: Word slots, ``capacity`` long
        write_index: Slot the next valid write lands in
        read_index: Slot the next valid read returns
        occupancy: Number of stored, unread words
        data_out: Word read by the last tick, or None
    """

    storage: tuple[int, ...]
    write_index: int = 0
    read_index: int = 0
    occupancy: int = 0
    data_out: int | None = None

    @classmethod
    def initial(cls, capacity: int) -> "QueueState":
        """Reset state: zeroed storage, pointers at 0, empty, no output."""
        return cls(storage=(0,) * capacity)

    @property
    def capacity(self) -> int:
        return len(self.storage)

    @property
    def empty(self) -> bool:
        return self.occupancy == 0

    @property
    def full(self) -> bool:
        return self.occupancy == self.capacity


@dataclass(frozen=True)
class QueueOutputs:
    """Signals driven by the queue after a tick."""

    data_out: int | None
    empty: bool
    full: bool
    occupancy: int

    @property
    def valid(self) -> bool:
        """True when ``data_out`` carries a real word."""
        return self.data_out is not None


def next_queue_state(
    state: QueueState,
    read: bool,
    write: bool,
    data_in: int = 0,
    reset: bool = False,
) -> QueueState:
    """
    Compute the post-tick state from the pre-tick state and the controls.

    This is a pure function; ``state`` is never modified.
    """
    if reset:
        return QueueState.initial(state.capacity)

    capacity = state.capacity

    if write and not read and not state.full:
        storage = list(state.storage)
        storage[state.write_index] = data_in
        return replace(
            state,
            storage=tuple(storage),
            write_index=(state.write_index + 1) % capacity,
            occupancy=state.occupancy + 1,
            data_out=None,
        )

    if read and not write and not state.empty:
        return replace(
            state,
            read_index=(state.read_index + 1) % capacity,
            occupancy=state.occupancy - 1,
            data_out=state.storage[state.read_index],
        )

    # Idle, blocked, or simultaneous read+write
    return replace(state, data_out=None)


class QueueModel:
    """
    Cycle-level bounded queue.

    Example:
        >>> q = QueueModel(WavefrontConfig(fifo_depth=8))
        >>> q.write(100)
        True
        >>> q.read()
        100
        >>> q.read() is None
        True
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config
        self._state = QueueState.initial(config.fifo_depth)
        self.cycle = 0

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------
    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def capacity(self) -> int:
        return self._state.capacity

    @property
    def occupancy(self) -> int:
        return self._state.occupancy

    @property
    def empty(self) -> bool:
        return self._state.empty

    @property
    def full(self) -> bool:
        return self._state.full

    def outputs(self) -> QueueOutputs:
        """Signals currently driven by the queue."""
        s = self._state
        return QueueOutputs(data_out=s.data_out, empty=s.empty, full=s.full, occupancy=s.occupancy)

    # -------------------------------------------------------------------------
    # Clocked behaviour
    # -------------------------------------------------------------------------
    def tick(
        self,
        read: bool = False,
        write: bool = False,
        data_in: int = 0,
        reset: bool = False,
    ) -> QueueOutputs:
        """
        Advance one clock tick.

        Args:
            read: Read control
            write: Write control
            data_in: Word presented on the data input (ignored unless writing)
            reset: Reset control, sampled with priority over read/write

        Returns:
            Outputs after the tick. ``data_out`` is None unless a read was valid.
        """
        if write and not reset:
            data_in = check_word(data_in, self.config.word_bits)
        self._state = next_queue_state(self._state, bool(read), bool(write), data_in, bool(reset))
        self.cycle += 1
        return self.outputs()

    def reset(self) -> None:
        """Force the initial state immediately, outside the tick cadence."""
        self._state = QueueState.initial(self.config.fifo_depth)

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------
    def write(self, word: int) -> bool:
        """Tick with only ``write`` asserted. Returns True if the word was stored."""
        before = self._state.occupancy
        self.tick(write=True, data_in=word)
        return self._state.occupancy != before

    def read(self) -> int | None:
        """Tick with only ``read`` asserted. Returns the word, or None if empty."""
        return self.tick(read=True).data_out

    def __repr__(self) -> str:
        return f"QueueModel(occupancy={self.occupancy}/{self.capacity}, cycle={self.cycle})"
