#!/usr/bin/env python3
"""Generate SystolicEngine Verilog from wavefront."""

import argparse
import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from wavefront.config import WavefrontConfig  # noqa: E402
from wavefront.core.engine import SystolicEngine  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Generate SystolicEngine Verilog")
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[2, 4],
        help="Array sizes to generate (default: 2 4)",
    )
    parser.add_argument("--word-bits", type=int, default=32, help="Word width in bits")
    args = parser.parse_args()

    gen_dir = project_root / "gen"
    gen_dir.mkdir(exist_ok=True)

    for size in args.sizes:
        config = WavefrontConfig(array_size=size, word_bits=args.word_bits)
        engine = SystolicEngine(config)

        # The smallest size keeps the plain module name used by the cocotb benches
        if size == min(args.sizes):
            name, output_path = "SystolicEngine", gen_dir / "systolic_engine.v"
        else:
            name = f"SystolicEngine_{size}x{size}"
            output_path = gen_dir / f"systolic_engine_{size}x{size}.v"

        with open(output_path, "w") as f:
            f.write(verilog.convert(engine, name=name))

        print(f"Generated {output_path} ({config.total_cells} cells)")


if __name__ == "__main__":
    main()
