"""
Wavefront Configuration Module

This module defines the configuration dataclass for the wavefront engine.
All construction-time constants are specified here and propagate through
both the Amaranth RTL and the behavioural models.

The engine computes, for every (row, col) of a square grid, the dot product
of an activation stream and a weight stream:

    C[r][c] = sum over ticks t of activation[t][r] * weight[t][c]

with every product and partial sum narrowed to ``word_bits``.
"""

from dataclasses import dataclass


@dataclass
class WavefrontConfig:
    """
    Configuration for the bounded queue and the systolic engine.

    Example:
        >>> config = WavefrontConfig(array_size=8, word_bits=16)
        >>> print(config.settle_ticks)  # 14
        >>> print(config.word_mask)  # 65535
    """

    # =========================================================================
    # Data Types (bit widths)
    # =========================================================================
    word_bits: int = 32
    """Bit width of every data word (queue slots, operands, accumulators)."""

    # =========================================================================
    # Bounded Queue
    # =========================================================================
    fifo_depth: int = 8
    """Number of word slots in the bounded queue."""

    # =========================================================================
    # Systolic Engine
    # =========================================================================
    array_size: int = 4
    """Grid dimension of the engine (array_size x array_size cells)."""

    # =========================================================================
    # Stimulus Range
    # =========================================================================
    operand_min: int = 0
    """Smallest operand value drawn by the stimulus generator (inclusive)."""

    operand_max: int = 99
    """Largest operand value drawn by the stimulus generator (inclusive)."""

    # =========================================================================
    # Computed Properties
    # =========================================================================
    @property
    def word_mask(self) -> int:
        """Mask selecting the low ``word_bits`` bits."""
        return (1 << self.word_bits) - 1

    @property
    def product_bits(self) -> int:
        """Width of the full multiplier product before narrowing."""
        return 2 * self.word_bits

    @property
    def fifo_count_bits(self) -> int:
        """Bits needed to hold an occupancy in [0, fifo_depth]."""
        return self.fifo_depth.bit_length()

    @property
    def settle_ticks(self) -> int:
        """Ticks after the last injection until the far corner cell has it."""
        return 2 * (self.array_size - 1)

    @property
    def readout_ticks(self) -> int:
        """Ticks needed to shift a full row out of the carry chain."""
        return self.array_size

    @property
    def total_cells(self) -> int:
        """Total number of compute cells."""
        return self.array_size * self.array_size

    def __post_init__(self):
        """Validate configuration parameters."""
        assert 1 <= self.word_bits <= 64, "word_bits must be in [1, 64]"
        assert self.fifo_depth > 0, "fifo_depth must be positive"
        assert self.array_size > 0, "array_size must be positive"
        assert self.operand_min >= 0, "operand_min must be non-negative"
        assert self.operand_min <= self.operand_max, "operand_min must not exceed operand_max"
        assert self.operand_max <= self.word_mask, "operand_max must fit in word_bits"


# Pre-defined configurations
DEFAULT_CONFIG = WavefrontConfig()
"""Default configuration: 32-bit words, depth-8 queue, 4x4 engine."""

SMALL_CONFIG = WavefrontConfig(array_size=2, fifo_depth=4)
"""Minimal configuration for fast simulation."""

NARROW_CONFIG = WavefrontConfig(word_bits=8, array_size=3, fifo_depth=5)
"""8-bit words; random operands overflow and exercise wraparound."""

LARGE_CONFIG = WavefrontConfig(array_size=8, fifo_depth=32)
"""Larger grid for throughput experiments."""
