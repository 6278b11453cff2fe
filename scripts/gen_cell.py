#!/usr/bin/env python3
"""Generate ComputeCell Verilog from wavefront, one module per word width."""

import argparse
import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from wavefront.config import WavefrontConfig  # noqa: E402
from wavefront.core.cell import ComputeCell  # noqa: E402


def cell_verilog(word_bits: int) -> tuple[str, str, str]:
    """Return (module name, file name, Verilog text) for ``word_bits``-wide words."""
    config = WavefrontConfig(word_bits=word_bits, operand_max=min(99, (1 << word_bits) - 1))
    if word_bits == 32:
        name, filename = "ComputeCell", "compute_cell.v"
    else:
        name, filename = f"ComputeCell_{word_bits}b", f"compute_cell_{word_bits}b.v"
    return name, filename, verilog.convert(ComputeCell(config), name=name)


def main():
    parser = argparse.ArgumentParser(description="Generate ComputeCell Verilog")
    parser.add_argument(
        "--word-bits",
        type=int,
        nargs="+",
        default=[32],
        help="Word widths to generate (default: 32)",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=project_root / "gen",
        help="Output directory (default: gen/)",
    )
    args = parser.parse_args()

    args.out_dir.mkdir(parents=True, exist_ok=True)

    for bits in args.word_bits:
        _name, filename, text = cell_verilog(bits)
        output_path = args.out_dir / filename
        output_path.write_text(text)
        print(f"Generated {output_path} ({bits}-bit words, {2 * bits}-bit product)")


if __name__ == "__main__":
    main()
