"""
Wavefront verification - pytest configuration and fixtures for the cocotb benches.

The benches in tests/ run against Verilog generated from the Amaranth
designs. The ``generated_rtl`` fixture produces that Verilog once per
session, with the same configurations the benches assume.
"""

import os
import shutil
import sys
from pathlib import Path

import pytest

# Add project paths to Python path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

SIM_EXECUTABLES = {"verilator": "verilator", "icarus": "iverilog"}

# Bench modules run inside the simulator via test_benches.py, not under pytest
collect_ignore = ["tests"]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "verilator: marks tests requiring Verilator")
    config.addinivalue_line("markers", "icarus: marks tests requiring Icarus Verilog")


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Skip simulator-specific tests for the simulator not selected by SIM."""
    sim = os.environ.get("SIM", "verilator").lower()

    for item in items:
        for name in SIM_EXECUTABLES:
            if name in item.keywords and sim != name:
                item.add_marker(pytest.mark.skip(reason=f"Requires SIM={name}"))


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def gen_dir(project_root) -> Path:
    """Return the generated RTL directory."""
    path = project_root / "gen"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture(scope="session")
def sim_name() -> str:
    """Return the selected simulator, skipping when it is not installed."""
    sim = os.environ.get("SIM", "verilator").lower()
    executable = SIM_EXECUTABLES.get(sim, sim)
    if shutil.which(executable) is None:
        pytest.skip(f"{executable} not found")
    return sim


@pytest.fixture(scope="session")
def generated_rtl(gen_dir) -> dict[str, Path]:
    """Generate the Verilog the benches expect; maps toplevel name to file."""
    pytest.importorskip("amaranth")
    from amaranth.back import verilog

    from wavefront.config import WavefrontConfig
    from wavefront.core.engine import SystolicEngine
    from wavefront.memory.fifo import BoundedQueue

    designs = {
        # toplevel: (design, file written by the matching scripts/gen_*.py)
        "BoundedQueue": (BoundedQueue(WavefrontConfig()), "bounded_queue.v"),
        "SystolicEngine": (SystolicEngine(WavefrontConfig(array_size=2)), "systolic_engine.v"),
    }

    files = {}
    for name, (design, filename) in designs.items():
        path = gen_dir / filename
        path.write_text(verilog.convert(design, name=name))
        files[name] = path
    return files
