# xorwow/jump.py
# Jump-ahead for the xorshift register: x(n + v) = A^v x(n) over GF(2).
#
# With JUMP_LOG2 = 2 the table holds A^1, A^4, A^16, ...  The distance is cut
# into base-4 digits from the low end and table[i] is applied digit_i times;
# the last table entry only takes a single bit.  Whatever is left once the
# table runs out goes to a fallback strategy.

import logging
import operator

from . import config
from .gf2 import mul_mat_mat, mul_mat_vec

logger = logging.getLogger('xorwow.jump')

MASK64 = (1 << 64) - 1


def check_u64(name, value):
    value = operator.index(value)
    if value < 0 or value > MASK64:
        raise ValueError(f"{name} must be in [0, 2**64), got {value}")
    return value


def squaring_fallback(x, v, last):
    # exponentiation by squaring; at most 64 iterations
    m = last
    while v > 0:
        m = mul_mat_mat(m, m)
        if v & 1:
            x = mul_mat_vec(m, x)
        v >>= 1
    return x


def linear_fallback(x, v, last):
    # remaining v counts units of twice the last matrix
    for _ in range(v << 1):
        x = mul_mat_vec(last, x)
    return x


STRATEGIES = {
    'squaring': squaring_fallback,
    'linear': linear_fallback,
}


def jump(x, distance, table, strategy=None, log2=None):
    """Return the register state int x advanced by `distance` steps.

    `table` is a sequence of matrices A^(2^(log2*i)) (see tables.py).
    """
    v = check_u64('distance', distance)
    if v == 0:
        return x
    if strategy is None:
        strategy = config.JUMP_STRATEGY
    if log2 is None:
        log2 = config.JUMP_LOG2
    try:
        fallback = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"unknown jump strategy {strategy!r}, expected one of {sorted(STRATEGIES)}") from None

    if not table:
        raise ValueError("jump table is empty")
    depth = len(table)
    mi = 0
    while v > 0 and mi < depth:
        l = log2 if mi < depth - 1 else 1
        for _ in range(v & ((1 << l) - 1)):
            x = mul_mat_vec(table[mi], x)
        mi += 1
        v >>= l

    if v > 0:
        logger.debug(f"distance {distance} exceeds table depth {depth}, {strategy} fallback for {v}")
        x = fallback(x, v, table[-1])
    return x
