"""
Unit tests for WavefrontConfig and the word arithmetic helpers.
"""

import pytest

from wavefront.arith import check_word, mac, multiply, wrap
from wavefront.config import (
    DEFAULT_CONFIG,
    LARGE_CONFIG,
    NARROW_CONFIG,
    SMALL_CONFIG,
    WavefrontConfig,
)


class TestWavefrontConfig:
    """Test suite for configuration validation and derived values."""

    def test_defaults(self):
        config = WavefrontConfig()
        assert config.word_bits == 32
        assert config.fifo_depth == 8
        assert config.array_size == 4
        assert (config.operand_min, config.operand_max) == (0, 99)

    def test_derived_properties(self):
        config = WavefrontConfig(word_bits=16, array_size=5, fifo_depth=8)
        assert config.word_mask == 0xFFFF
        assert config.product_bits == 32
        assert config.fifo_count_bits == 4
        assert config.settle_ticks == 8
        assert config.readout_ticks == 5
        assert config.total_cells == 25

    def test_single_cell_has_no_settle(self):
        assert WavefrontConfig(array_size=1).settle_ticks == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"word_bits": 0},
            {"word_bits": 65},
            {"fifo_depth": 0},
            {"array_size": 0},
            {"operand_min": -1},
            {"operand_min": 10, "operand_max": 9},
            {"word_bits": 8, "operand_max": 256},
        ],
    )
    def test_invalid_configs_rejected(self, kwargs):
        with pytest.raises(AssertionError):
            WavefrontConfig(**kwargs)

    def test_presets(self):
        assert DEFAULT_CONFIG.array_size == 4
        assert SMALL_CONFIG.array_size == 2
        assert NARROW_CONFIG.word_bits == 8
        assert LARGE_CONFIG.array_size == 8
        assert LARGE_CONFIG.fifo_depth == 32


class TestArith:
    """Test suite for word arithmetic."""

    def test_wrap(self):
        assert wrap(0x1FF, 8) == 0xFF
        assert wrap(256, 8) == 0
        assert wrap(-1, 8) == 255

    def test_multiply_narrows_product(self):
        assert multiply(3, 4, 32) == 12
        assert multiply(200, 3, 8) == 600 % 256
        assert multiply(0xFFFF_FFFF, 0xFFFF_FFFF, 32) == 1

    def test_mac_wraps_sum(self):
        assert mac(250, 2, 5, 8) == 4
        assert mac(10, 0, 99, 32) == 10

    def test_check_word(self):
        assert check_word(255, 8) == 255
        with pytest.raises(ValueError):
            check_word(256, 8)
        with pytest.raises(ValueError):
            check_word(-1, 8)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
