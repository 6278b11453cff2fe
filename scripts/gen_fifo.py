#!/usr/bin/env python3
"""Generate BoundedQueue Verilog from wavefront."""

import sys
from pathlib import Path

# Add src to path if running from scripts/
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from amaranth.back import verilog  # noqa: E402

from wavefront.config import WavefrontConfig  # noqa: E402
from wavefront.memory.fifo import BoundedQueue  # noqa: E402


def main():
    gen_dir = project_root / "gen"
    gen_dir.mkdir(exist_ok=True)

    config = WavefrontConfig()
    fifo = BoundedQueue(config)

    output_path = gen_dir / "bounded_queue.v"
    with open(output_path, "w") as f:
        f.write(verilog.convert(fifo, name="BoundedQueue"))

    print(f"Generated {output_path} (depth={config.fifo_depth}, width={config.word_bits})")


if __name__ == "__main__":
    main()
