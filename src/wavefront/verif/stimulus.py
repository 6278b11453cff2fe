"""
Seeded stimulus for the engine and the queue.

All randomness comes from a numpy Generator created from the seed, so a
run can be replayed exactly from its seed.
"""

from dataclasses import dataclass

import numpy as np

from ..config import WavefrontConfig


@dataclass(frozen=True)
class QueueOp:
    """Control and data presented to the queue on one tick."""

    read: bool = False
    write: bool = False
    data_in: int = 0
    reset: bool = False


class StimulusGenerator:
    """
    Randomized operand source.

    Example:
        >>> gen = StimulusGenerator(WavefrontConfig(array_size=2), seed=7)
        >>> activations, weights = gen.operands()
        >>> activations.shape
        (2, 2)
    """

    def __init__(self, config: WavefrontConfig, seed: int = 0):
        self.config = config
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def reseed(self, seed: int | None = None) -> None:
        """Restart the sequence, optionally from a new seed."""
        if seed is not None:
            self.seed = seed
        self._rng = np.random.default_rng(self.seed)

    def words(self, shape) -> np.ndarray:
        """Words drawn uniformly from [operand_min, operand_max]."""
        cfg = self.config
        return self._rng.integers(
            cfg.operand_min, cfg.operand_max, size=shape, dtype=np.uint64, endpoint=True
        )

    def operands(self, k: int | None = None) -> tuple[np.ndarray, np.ndarray]:
        """
        Generate one contraction's worth of boundary vectors.

        Args:
            k: Contraction length in ticks (default: array_size)

        Returns:
            (activations, weights), each k x array_size. Row t is the vector
            injected on tick t.
        """
        n = self.config.array_size
        k = n if k is None else k
        if k < 0:
            raise ValueError(f"contraction length must be non-negative, got {k}")
        return self.words((k, n)), self.words((k, n))

    def queue_ops(
        self,
        count: int,
        p_read: float = 0.5,
        p_write: float = 0.5,
        p_reset: float = 0.0,
    ) -> list[QueueOp]:
        """
        Random queue traffic, including simultaneous read+write ticks.

        Each control is drawn independently with the given probability.
        """
        ops = []
        for _ in range(count):
            ops.append(
                QueueOp(
                    read=bool(self._rng.random() < p_read),
                    write=bool(self._rng.random() < p_write),
                    data_in=int(self.words(())),
                    reset=bool(self._rng.random() < p_reset),
                )
            )
        return ops
