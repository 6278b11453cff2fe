"""
Unit tests for the protocol invariant checkers.

These tests verify:
1. Checked models run clean under random traffic
2. Corrupted transitions are detected
3. Strict mode raises, lenient mode records
"""

from dataclasses import replace

import numpy as np
import pytest

from wavefront.config import WavefrontConfig
from wavefront.model.cell import CellState
from wavefront.model.engine import EngineInputs, EngineModel
from wavefront.model.queue import QueueState, next_queue_state
from wavefront.verif.driver import matmul_schedule
from wavefront.verif.properties import (
    CheckedEngine,
    CheckedQueue,
    EngineChecker,
    ProtocolViolation,
    QueueChecker,
)
from wavefront.verif.stimulus import StimulusGenerator


class TestQueueChecker:
    """Test suite for QueueChecker."""

    @pytest.fixture
    def config(self):
        return WavefrontConfig(fifo_depth=4)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_random_traffic_is_clean(self, config, seed):
        queue = CheckedQueue(config)
        for op in StimulusGenerator(config, seed=seed).queue_ops(500, p_reset=0.01):
            queue.tick(read=op.read, write=op.write, data_in=op.data_in, reset=op.reset)
        assert queue.checker.passed
        assert queue.checker.ticks == 500

    def test_direct_reset_checked(self, config):
        queue = CheckedQueue(config)
        queue.write(3)
        queue.reset()
        assert queue.checker.passed

    def test_detects_simultaneous_mutation(self, config):
        checker = QueueChecker(config)
        before = QueueState.initial(4)
        bad = next_queue_state(before, read=False, write=True, data_in=7)

        with pytest.raises(ProtocolViolation, match="simultaneous"):
            checker.observe(before, True, True, 7, False, bad)

    def test_detects_wrong_read_data(self, config):
        checker = QueueChecker(config, strict=False)
        before = next_queue_state(QueueState.initial(4), read=False, write=True, data_in=5)
        good = next_queue_state(before, read=True, write=False)
        bad = replace(good, data_out=6)

        checker.observe(before, True, False, 0, False, good)
        assert checker.passed
        checker.observe(before, True, False, 0, False, bad)
        assert not checker.passed
        assert any("head was 5" in v for v in checker.violations)

    def test_detects_broken_occupancy(self, config):
        checker = QueueChecker(config, strict=False)
        checker.check_state(replace(QueueState.initial(4), occupancy=5))
        assert any("outside" in v for v in checker.violations)

    def test_detects_index_collision(self, config):
        checker = QueueChecker(config, strict=False)
        checker.check_state(replace(QueueState.initial(4), occupancy=2))
        assert any("coincide" in v for v in checker.violations)

    def test_detects_data_on_idle_tick(self, config):
        checker = QueueChecker(config, strict=False)
        before = QueueState.initial(4)
        checker.observe(before, False, False, 0, False, replace(before, data_out=0))
        assert not checker.passed

    def test_detects_dirty_reset(self, config):
        checker = QueueChecker(config, strict=False)
        before = next_queue_state(QueueState.initial(4), read=False, write=True, data_in=1)
        checker.observe(before, False, False, 0, True, before)
        assert any("reset" in v for v in checker.violations)


class TestEngineChecker:
    """Test suite for EngineChecker."""

    @pytest.fixture
    def config(self):
        return WavefrontConfig(array_size=3, word_bits=8, operand_max=255)

    @pytest.mark.parametrize("seed", [0, 1])
    def test_full_run_is_clean(self, config, seed):
        engine = CheckedEngine(config)
        activations, weights = StimulusGenerator(config, seed=seed).operands(5)
        for tick in matmul_schedule(config, activations, weights):
            engine.step(tick.inputs)
        engine.tick([1, 2, 3], [4, 5, 6], reset=True)
        engine.reset()
        assert engine.checker.passed
        assert engine.checker.ticks == len(matmul_schedule(config, activations, weights)) + 1

    def test_detects_missed_hop(self, config):
        checker = EngineChecker(config)
        before = EngineModel(config)
        after = before.snapshot()
        inputs = EngineInputs(activations=(4, 0, 0), weights=(5, 0, 0))
        outputs = after.tick(inputs.activations, inputs.weights)
        after.cells[0][0] = replace(after.cells[0][0], activation_out=0)

        with pytest.raises(ProtocolViolation, match="activation did not hop"):
            checker.observe(before, inputs, outputs, after)

    def test_detects_accumulate_while_loaded(self, config):
        checker = EngineChecker(config, strict=False)
        before = EngineModel(config)
        before.cells[1][1] = CellState(accumulator=10)
        after = before.snapshot()
        inputs = EngineInputs.idle(3, load=True)
        outputs = after.step(inputs)
        after.cells[1][1] = replace(after.cells[1][1], accumulator=11)

        checker.observe(before, inputs, outputs, after)
        assert any("(1, 1) accumulator 11" in v for v in checker.violations)

    def test_detects_wrong_output(self, config):
        checker = EngineChecker(config, strict=False)
        before = EngineModel(config)
        before.cells[0][2] = CellState(accumulator=9)
        after = before.snapshot()
        inputs = EngineInputs.idle(3, load=True)
        after.step(inputs)

        checker.observe(before, inputs, [0, 0, 0], after)
        assert any("carry chain" in v for v in checker.violations)

    def test_detects_inverted_carry_mux(self, config, monkeypatch):
        """A model whose carry mux picks the wrong input is caught during readout."""
        import wavefront.model.engine as engine_module

        monkeypatch.setattr(
            engine_module,
            "result_out",
            lambda state, carry_in, carry_enable: state.accumulator if carry_enable else carry_in,
        )
        engine = CheckedEngine(config)
        ones = np.ones((3, 3), dtype=np.uint64)

        with pytest.raises(ProtocolViolation, match="carry chain"):
            for tick in matmul_schedule(config, ones, ones):
                engine.step(tick.inputs)

    def test_expected_outputs_walk(self):
        accs = [[1, 2, 3], [4, 5, 6]]
        assert EngineChecker.expected_outputs(accs, (False, False, False)) == [3, 6]
        assert EngineChecker.expected_outputs(accs, (False, False, True)) == [2, 5]
        assert EngineChecker.expected_outputs(accs, (False, True, True)) == [1, 4]
        assert EngineChecker.expected_outputs(accs, (True, True, True)) == [0, 0]
        # Enables below the highest clear column do not matter
        assert EngineChecker.expected_outputs(accs, (True, False, True)) == [2, 5]

    def test_detects_stalled_skew(self, config):
        checker = EngineChecker(config, strict=False)
        before = EngineModel(config)
        after = before.snapshot()
        inputs = EngineInputs(activations=(0, 0, 8), weights=(0, 0, 0))
        outputs = after.step(inputs)
        after.act_skew[2] = [0, 0]

        checker.observe(before, inputs, outputs, after)
        assert any("activation skew lane 2" in v for v in checker.violations)

    def test_accepts_numpy_carry_vector(self, config):
        engine = CheckedEngine(config)
        engine.cells[0][1] = CellState(accumulator=7)
        outputs = engine.tick([0] * 3, [0] * 3, load=True, carry_enable=np.array([0, 0, 1]))
        assert outputs == [7, 0, 0]
        assert engine.checker.passed

    def test_reset_tick_ignores_bad_operands(self, config):
        engine = CheckedEngine(config)
        assert engine.tick([1 << 40] * 3, [0] * 3, reset=True) == [0, 0, 0]
        assert engine.checker.passed

    def test_detects_dirty_reset(self, config):
        checker = EngineChecker(config, strict=False)
        model = EngineModel(config)
        model.cells[2][0] = CellState(accumulator=1)
        checker.check_reset(model)
        assert not checker.passed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
