"""
Reference scoreboards.

The engine scoreboard keeps its own expected sum for every (row, col),
updated from the same boundary vectors the engine receives, and compares
each value the engine emits during readout. Readout produces each row's
columns in descending order, so readout step k is checked against column
size-1-k.

The queue scoreboard mirrors accepted writes in a deque and checks that
valid reads come back in write order.
"""

import logging
from collections import deque
from collections.abc import Sequence

import numpy as np

from ..config import WavefrontConfig

logger = logging.getLogger(__name__)


class Scoreboard:
    """
    Expected-value tracker for the systolic engine.

    Attributes:
        mismatches: Number of compared values that differed
        checked: Number of compared values
    """

    def __init__(self, config: WavefrontConfig):
        self.config = config
        self.size = config.array_size
        self._mask = np.uint64(config.word_mask)
        self.reset()

    def reset(self) -> None:
        """Forget all recorded operands and results."""
        self._expected = np.zeros((self.size, self.size), dtype=np.uint64)
        self.mismatches = 0
        self.checked = 0

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------
    def record(self, activations: Sequence[int], weights: Sequence[int]) -> None:
        """Accumulate the products of one injected (activation, weight) vector pair."""
        a = np.asarray(activations, dtype=np.uint64)
        w = np.asarray(weights, dtype=np.uint64)
        if a.shape != (self.size,) or w.shape != (self.size,):
            raise ValueError(f"expected vectors of length {self.size}")
        products = np.outer(a, w) & self._mask
        self._expected = (self._expected + products) & self._mask

    def record_all(self, activations: np.ndarray, weights: np.ndarray) -> None:
        """Record every tick of a k x size stimulus."""
        for a, w in zip(activations, weights, strict=True):
            self.record(a, w)

    def expected(self) -> np.ndarray:
        """Expected accumulator matrix, expected[row, col]."""
        return self._expected.copy()

    def expected_stream(self, row: int) -> list[int]:
        """Values row ``row`` should emit during readout, in emission order."""
        return [int(self._expected[row, col]) for col in reversed(range(self.size))]

    # -------------------------------------------------------------------------
    # Checking
    # -------------------------------------------------------------------------
    def check(self, row: int, col: int, observed: int) -> bool:
        """Compare one observed value against the expectation."""
        expected = int(self._expected[row, col])
        self.checked += 1
        if int(observed) != expected:
            self.mismatches += 1
            logger.error(
                "row %d col %d: expected %d, observed %d", row, col, expected, int(observed)
            )
            return False
        return True

    def check_readout(self, readout: Sequence[Sequence[int]]) -> int:
        """
        Check a full readout.

        Args:
            readout: readout[step][row], ``size`` steps long

        Returns:
            Mismatches found in this readout.
        """
        if len(readout) != self.size:
            raise ValueError(f"readout must have {self.size} steps, got {len(readout)}")
        before = self.mismatches
        for step, values in enumerate(readout):
            col = self.size - 1 - step
            for row, observed in enumerate(values):
                self.check(row, col, observed)
        found = self.mismatches - before
        if found:
            logger.warning("readout finished with %d mismatches", found)
        else:
            logger.info("readout matched %d values", self.size * self.size)
        return found

    @property
    def passed(self) -> bool:
        return self.mismatches == 0


class QueueScoreboard:
    """FIFO-order tracker for the bounded queue."""

    def __init__(self):
        self._pending: deque[int] = deque()
        self.mismatches = 0
        self.checked = 0

    def reset(self) -> None:
        """Drop expected words (the queue was reset)."""
        self._pending.clear()

    def on_write(self, word: int) -> None:
        """The queue accepted ``word``."""
        self._pending.append(int(word))

    def on_read(self, observed: int) -> bool:
        """The queue returned ``observed`` on a valid read."""
        self.checked += 1
        if not self._pending:
            self.mismatches += 1
            logger.error("queue returned %d with nothing outstanding", observed)
            return False
        expected = self._pending.popleft()
        if observed != expected:
            self.mismatches += 1
            logger.error("queue returned %d, expected %d", observed, expected)
            return False
        return True

    @property
    def outstanding(self) -> int:
        return len(self._pending)
