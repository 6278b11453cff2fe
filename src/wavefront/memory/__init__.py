"""
Storage building blocks.

- BoundedQueue: circular word queue with occupancy counter
- SkewBuffer: triangular delay lines feeding the engine boundary
"""

from .fifo import BoundedQueue
from .skew_buffer import SkewBuffer

__all__ = ["BoundedQueue", "SkewBuffer"]
