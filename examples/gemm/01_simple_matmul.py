#!/usr/bin/env python3
"""
Simple Matrix Multiply Demo.

This example runs one contraction C = A^T @ W through the systolic engine
and checks every value it emits. It shows:

1. Problem Setup
   - Draw seeded operands with the StimulusGenerator
   - Compute the reference with NumPy

2. Schedule
   - Build the LOAD / SETTLE / READOUT / CLEAR tick schedule

3. Execution
   - Run the schedule on the behavioural model
   - Optionally run the same schedule on the Amaranth RTL

4. Verification
   - Compare each readout against the Scoreboard
   - Reassemble the result matrix and compare against NumPy

Usage:
    python 01_simple_matmul.py [--size N] [--k K] [--seed S] [--rtl]

    --size N      Array size (default: 4, an NxN grid of cells)
    --k K         Contraction length in ticks (default: N)
    --seed S      Stimulus seed (default: 0)
    --rtl         Also run the Amaranth RTL simulation
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Add src to path if running from examples/
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from wavefront.config import WavefrontConfig  # noqa: E402
from wavefront.model.engine import EngineModel  # noqa: E402
from wavefront.verif.driver import (  # noqa: E402
    Phase,
    matmul_schedule,
    readout_to_matrix,
    run_model,
)
from wavefront.verif.scoreboard import Scoreboard  # noqa: E402
from wavefront.verif.stimulus import StimulusGenerator  # noqa: E402


def run_rtl(config: WavefrontConfig, activations: np.ndarray, weights: np.ndarray):
    """Run the schedule on SystolicEngine under amaranth.sim."""
    from amaranth.sim import Simulator

    from wavefront.core.engine import SystolicEngine
    from wavefront.verif.driver import drive_engine

    dut = SystolicEngine(config)
    schedule = matmul_schedule(config, activations, weights)
    results = {}

    async def testbench(ctx):
        results["readout"] = await drive_engine(ctx, dut, schedule)

    sim = Simulator(dut)
    sim.add_clock(1e-6)
    sim.add_testbench(testbench)
    sim.run()
    return results["readout"]


def verify(name: str, config: WavefrontConfig, readout, activations, weights) -> bool:
    board = Scoreboard(config)
    board.record_all(activations, weights)
    mismatches = board.check_readout(readout)

    n = config.array_size
    print(f"\n   {name} readout (one line per step, one value per row):")
    for step, values in enumerate(readout):
        print(f"     step {step} (col {n - 1 - step}): {values}")

    if mismatches == 0:
        print(f"   PASS: {name} matched all {board.checked} values")
        return True
    print(f"   FAIL: {name} had {mismatches} mismatches")
    print(f"   Got:\n{readout_to_matrix(readout, n)}")
    return False


def run_demo(size: int = 4, k: int | None = None, seed: int = 0, use_rtl: bool = False) -> bool:
    config = WavefrontConfig(array_size=size)
    k = size if k is None else k

    print("=" * 70)
    print("Simple Matrix Multiply Demo")
    print("=" * 70)

    # -------------------------------------------------------------------------
    # 1. Problem Setup
    # -------------------------------------------------------------------------
    print("\n1. Problem Setup")
    print("-" * 40)
    activations, weights = StimulusGenerator(config, seed=seed).operands(k)
    expected = (activations.T @ weights) & np.uint64(config.word_mask)

    print(f"   Array: {size} x {size}, {config.word_bits}-bit words, k={k}, seed={seed}")
    print(f"\n   Activations ({k}x{size}, row t injected on tick t):")
    print(activations)
    print(f"\n   Weights ({k}x{size}):")
    print(weights)
    print(f"\n   Expected C ({size}x{size}):")
    print(expected)

    # -------------------------------------------------------------------------
    # 2. Schedule
    # -------------------------------------------------------------------------
    print("\n2. Schedule")
    print("-" * 40)
    schedule = matmul_schedule(config, activations, weights)
    for phase in Phase:
        ticks = sum(1 for t in schedule if t.phase is phase)
        print(f"   {phase.name:<8} {ticks:3d} ticks")
    print(f"   total    {len(schedule):3d} ticks")

    # -------------------------------------------------------------------------
    # 3-4. Execution and Verification
    # -------------------------------------------------------------------------
    print("\n3. Execution")
    print("-" * 40)
    readout = run_model(EngineModel(config), activations, weights)
    ok = verify("model", config, readout, activations, weights)

    if use_rtl:
        print("\n   Running RTL simulation...")
        readout = run_rtl(config, activations, weights)
        ok &= verify("RTL", config, readout, activations, weights)

    print("\n" + "=" * 70)
    print("Demo completed successfully!" if ok else "Demo FAILED")
    print("=" * 70)
    return ok


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Simple Matrix Multiply Demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--size", type=int, default=4, help="Array size N (default: 4)")
    parser.add_argument("--k", type=int, default=None, help="Contraction length (default: N)")
    parser.add_argument("--seed", type=int, default=0, help="Stimulus seed (default: 0)")
    parser.add_argument("--rtl", action="store_true", help="Also run the Amaranth RTL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scoreboard detail")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    success = run_demo(size=args.size, k=args.k, seed=args.seed, use_rtl=args.rtl)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
