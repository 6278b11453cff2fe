"""
Protocol invariant checkers.

Each checker is handed the state before a tick, the inputs sampled on the
tick, and the state after it, and verifies the rules every tick must obey.
They serve two roles:

- runtime assertions, attached to a model through CheckedQueue /
  CheckedEngine
- oracles for randomized tests, fed from recorded traces

In strict mode a violation raises ProtocolViolation immediately; otherwise
violations are logged and collected in ``violations``.
"""

import logging
from collections.abc import Sequence

from ..config import WavefrontConfig
from ..model.cell import RESET_CELL
from ..model.engine import EngineInputs, EngineModel
from ..model.queue import QueueModel, QueueOutputs, QueueState

logger = logging.getLogger(__name__)


class ProtocolViolation(AssertionError):
    """A tick broke a protocol invariant."""


class _Checker:
    def __init__(self, config: WavefrontConfig, strict: bool = True):
        self.config = config
        self.strict = strict
        self.violations: list[str] = []
        self.ticks = 0

    def _fail(self, message: str) -> None:
        message = f"tick {self.ticks}: {message}"
        self.violations.append(message)
        logger.error(message)
        if self.strict:
            raise ProtocolViolation(message)

    @property
    def passed(self) -> bool:
        return not self.violations


# =============================================================================
# Bounded Queue
# =============================================================================


class QueueChecker(_Checker):
    """Invariants of the bounded queue."""

    def check_state(self, state: QueueState) -> None:
        """Invariants that hold for every reachable state."""
        cap = self.config.fifo_depth
        if state.capacity != cap:
            self._fail(f"storage has {state.capacity} slots, expected {cap}")
        if not 0 <= state.occupancy <= cap:
            self._fail(f"occupancy {state.occupancy} outside [0, {cap}]")
        if not (0 <= state.write_index < cap and 0 <= state.read_index < cap):
            self._fail(f"index out of range: w={state.write_index} r={state.read_index}")
        if not state.empty and not state.full and state.write_index == state.read_index:
            self._fail("write and read index coincide while neither empty nor full")
        expected_gap = (state.read_index + state.occupancy) % cap
        if expected_gap != state.write_index:
            self._fail(
                f"read_index {state.read_index} + occupancy {state.occupancy} "
                f"does not reach write_index {state.write_index}"
            )

    def check_initial(self, state: QueueState) -> None:
        if state != QueueState.initial(self.config.fifo_depth):
            self._fail(f"reset did not produce the initial state: {state}")

    def observe(
        self,
        before: QueueState,
        read: bool,
        write: bool,
        data_in: int,
        reset: bool,
        after: QueueState,
    ) -> None:
        """Check one tick of the queue."""
        self.ticks += 1
        self.check_state(after)

        if reset:
            self.check_initial(after)
            return

        write_valid = write and not read and not before.full
        read_valid = read and not write and not before.empty
        unchanged = (
            after.write_index == before.write_index
            and after.read_index == before.read_index
            and after.occupancy == before.occupancy
            and after.storage == before.storage
        )

        if read and write:
            if not unchanged:
                self._fail("simultaneous read+write mutated the queue")
            if after.data_out is not None:
                self._fail("simultaneous read+write produced data")
        elif write_valid:
            if after.occupancy != before.occupancy + 1:
                self._fail("valid write did not increment occupancy")
            if after.storage[before.write_index] != data_in:
                self._fail(f"slot {before.write_index} does not hold written word {data_in}")
            if after.read_index != before.read_index:
                self._fail("write moved the read index")
        elif read_valid:
            head = before.storage[before.read_index]
            if after.data_out != head:
                self._fail(f"read returned {after.data_out}, head was {head}")
            if after.occupancy != before.occupancy - 1:
                self._fail("valid read did not decrement occupancy")
            if after.write_index != before.write_index or after.storage != before.storage:
                self._fail("read modified the write side")
        else:
            if not unchanged:
                self._fail("idle or blocked tick mutated the queue")
            if after.data_out is not None:
                self._fail("idle or blocked tick produced data")

        if after.data_out is not None and not read_valid:
            self._fail("data_out carries a word without a valid read")


class CheckedQueue(QueueModel):
    """QueueModel that runs a QueueChecker on every tick."""

    def __init__(self, config: WavefrontConfig, checker: QueueChecker | None = None):
        super().__init__(config)
        self.checker = checker or QueueChecker(config)

    def tick(
        self,
        read: bool = False,
        write: bool = False,
        data_in: int = 0,
        reset: bool = False,
    ) -> QueueOutputs:
        before = self.state
        outputs = super().tick(read=read, write=write, data_in=data_in, reset=reset)
        self.checker.observe(before, bool(read), bool(write), data_in, bool(reset), self.state)
        return outputs

    def reset(self) -> None:
        super().reset()
        self.checker.check_initial(self.state)


# =============================================================================
# Systolic Engine
# =============================================================================


class EngineChecker(_Checker):
    """Invariants of the systolic engine."""

    def check_reset(self, model: EngineModel) -> None:
        n = model.size
        for i in range(n):
            for j in range(n):
                if model.cell(i, j) != RESET_CELL:
                    self._fail(f"cell ({i}, {j}) not cleared by reset: {model.cell(i, j)}")
        if any(any(p) for p in model.act_skew) or any(any(p) for p in model.weight_skew):
            self._fail("skew registers not cleared by reset")

    @staticmethod
    def expected_outputs(
        accumulators: Sequence[Sequence[int]], carry_enable: Sequence[bool]
    ) -> list[int]:
        """
        Row outputs implied by the carry chain.

        Walking from column size-1 down, each row shows the first
        accumulator whose carry-enable is clear; 0 if every column carries.
        """
        outputs = []
        for row in accumulators:
            value = 0
            for col in reversed(range(len(row))):
                if not carry_enable[col]:
                    value = row[col]
                    break
            outputs.append(value)
        return outputs

    def observe(
        self,
        before: EngineModel,
        inputs: EngineInputs,
        outputs: Sequence[int],
        after: EngineModel,
    ) -> None:
        """
        Check one tick of the engine.

        Every expectation is derived here from the raw registers of
        ``before`` (accumulators, passthroughs, skew pipes), never from the
        model's edge-buffer helpers.

        Args:
            before: Snapshot taken before the tick
            inputs: Boundary signals of the tick
            outputs: dataOut reported for the tick
            after: Model after the tick
        """
        self.ticks += 1
        n = before.size
        mask = self.config.word_mask

        if inputs.reset:
            self.check_reset(after)
            if any(outputs):
                self._fail(f"outputs not zero during reset: {list(outputs)}")
            return

        carry = inputs.carry_enable or (False,) * n
        accs = [[before.cell(i, j).accumulator for j in range(n)] for i in range(n)]
        expected_out = self.expected_outputs(accs, carry)
        if list(outputs) != expected_out:
            self._fail(f"dataOut {list(outputs)} does not follow the carry chain {expected_out}")

        # Boundary after the skew: lane 0 is combinational, lane k shows its oldest register
        act_boundary = [
            inputs.activations[k] if k == 0 else before.act_skew[k][k - 1] for k in range(n)
        ]
        weight_boundary = [
            inputs.weights[k] if k == 0 else before.weight_skew[k][k - 1] for k in range(n)
        ]

        for lane in range(1, n):
            shifted_act = [inputs.activations[lane]] + before.act_skew[lane][: lane - 1]
            shifted_weight = [inputs.weights[lane]] + before.weight_skew[lane][: lane - 1]
            if after.act_skew[lane] != shifted_act:
                self._fail(f"activation skew lane {lane} did not shift: {after.act_skew[lane]}")
            if after.weight_skew[lane] != shifted_weight:
                self._fail(f"weight skew lane {lane} did not shift: {after.weight_skew[lane]}")

        for i in range(n):
            for j in range(n):
                old = before.cell(i, j)
                new = after.cell(i, j)
                a_in = act_boundary[i] if j == 0 else before.cell(i, j - 1).activation_out
                w_in = weight_boundary[j] if i == 0 else before.cell(i - 1, j).weight_out

                # Operands move exactly one hop
                if new.weight_out != w_in:
                    self._fail(f"cell ({i}, {j}) weight did not hop: {new.weight_out}")
                if new.activation_out != a_in:
                    self._fail(f"cell ({i}, {j}) activation did not hop: {new.activation_out}")

                # clear > load > accumulate
                if inputs.clear:
                    expected = 0
                elif inputs.load:
                    expected = old.accumulator
                else:
                    expected = (old.accumulator + a_in * w_in) & mask
                if new.accumulator != expected:
                    self._fail(
                        f"cell ({i}, {j}) accumulator {new.accumulator}, expected {expected}"
                    )


class CheckedEngine(EngineModel):
    """EngineModel that runs an EngineChecker on every tick."""

    def __init__(self, config: WavefrontConfig, checker: EngineChecker | None = None):
        super().__init__(config)
        self.checker = checker or EngineChecker(config)

    def tick(
        self,
        activations: Sequence[int],
        weights: Sequence[int],
        load: bool = False,
        clear: bool = False,
        carry_enable: Sequence[bool] | None = None,
        reset: bool = False,
    ) -> list[int]:
        before = self.snapshot()
        outputs = super().tick(
            activations, weights, load=load, clear=clear, carry_enable=carry_enable, reset=reset
        )
        carry = () if carry_enable is None else tuple(bool(c) for c in carry_enable)
        inputs = EngineInputs(
            activations=tuple(int(a) for a in activations),
            weights=tuple(int(w) for w in weights),
            load=load,
            clear=clear,
            carry_enable=carry,
            reset=reset,
        )
        self.checker.observe(before, inputs, outputs, self)
        return outputs

    def reset(self) -> None:
        super().reset()
        self.checker.check_reset(self)
