"""
Wavefront - A cycle-accurate systolic matmul engine and bounded queue.

This package provides Amaranth HDL components for a mesh of
multiply-accumulate cells fed on its boundary and read out through a carry
chain, a bounded circular queue, matching pure-Python behavioural models,
and the verification collaborators (stimulus, scoreboard, protocol checker)
used to test them.
"""

from .config import WavefrontConfig

__version__ = "0.1.0"
__all__ = ["WavefrontConfig", "__version__"]
