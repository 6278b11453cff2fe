"""
Build the generated Verilog and run each cocotb bench under the selected simulator.

Usage:
    SIM=verilator pytest verif/cocotb/test_benches.py
    SIM=icarus pytest verif/cocotb/test_benches.py
"""

import os
import sys
from pathlib import Path

import pytest

runner_mod = pytest.importorskip("cocotb_tools.runner")

BENCH_DIR = Path(__file__).parent / "tests"

BENCHES = [
    # (toplevel, bench directory, test module)
    ("BoundedQueue", "fifo", "test_fifo"),
    ("SystolicEngine", "engine", "test_engine"),
]


@pytest.mark.slow
@pytest.mark.parametrize(("toplevel", "bench", "module"), BENCHES)
def test_bench(toplevel, bench, module, sim_name, generated_rtl, project_root, tmp_path):
    runner = runner_mod.get_runner(sim_name)
    runner.build(
        sources=[generated_rtl[toplevel]],
        hdl_toplevel=toplevel,
        build_dir=tmp_path / "sim_build",
        always=True,
    )

    test_dir = BENCH_DIR / bench
    pythonpath = os.pathsep.join([str(test_dir), str(project_root / "src"), *sys.path])
    runner.test(
        hdl_toplevel=toplevel,
        test_module=module,
        test_dir=test_dir,
        build_dir=tmp_path / "sim_build",
        extra_env={"PYTHONPATH": pythonpath},
    )
