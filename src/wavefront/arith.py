"""
Word arithmetic shared by the behavioural models and the reference checks.

Words are unsigned and ``bits`` wide. The multiplier produces a
double-width product which is narrowed back to ``bits`` before it reaches
an accumulator, so overflow wraps around exactly as the RTL does.
"""


def wrap(value: int, bits: int) -> int:
    """Narrow ``value`` to ``bits`` bits (two's-complement wraparound)."""
    return value & ((1 << bits) - 1)


def check_word(value: int, bits: int) -> int:
    """Return ``value`` as an int, raising ValueError if it is not a ``bits``-bit word."""
    value = int(value)
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{value} is not a valid {bits}-bit word")
    return value


def multiply(a: int, b: int, bits: int) -> int:
    """
    Multiply two ``bits``-wide operands.

    The full product is ``2 * bits`` wide; only the low ``bits`` survive.
    """
    product = wrap(a, bits) * wrap(b, bits)
    return wrap(product, bits)


def mac(acc: int, a: int, b: int, bits: int) -> int:
    """Multiply-accumulate with wraparound: ``acc + a * b`` narrowed to ``bits``."""
    return wrap(acc + multiply(a, b, bits), bits)
