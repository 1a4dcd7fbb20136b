# xorwow/engine.py
# XORWOW engine (G. Marsaglia, "Xorshift RNGs", 2003).
# State: 160-bit xorshift register x[0..4] plus a 32-bit Weyl sequence d.
# Output of each step: d + x[4] (mod 2^32).
#
# A subsequence is 2^67 outputs long.  Workers that share a seed and use
# distinct subsequence indices get non-overlapping streams.

import operator

import numpy as np

from . import config, tables
from .gf2 import MASK32, int_to_words, words_to_int
from .jump import check_u64, jump

MASK64 = (1 << 64) - 1

X_INIT = (123456789, 362436069, 521288629, 88675123, 5783321)
D_INIT = 6615241
WEYL_INCREMENT = 362437

# seed mixing constants, kept identical to cuRAND so sequences match it
SEED_XOR_LO = 0xaad26b49
SEED_XOR_HI = 0xf7dcefdd
SEED_MUL_LO = 1099087573
SEED_MUL_HI = 2591861531

# Layout of a persisted state: the device struct, little-endian, C-aligned (48 bytes)
STATE_DTYPE = np.dtype([
    ('x', '<u4', (5,)),
    ('d', '<u4'),
    ('boxmuller_float_state', '<u4'),
    ('boxmuller_double_state', '<u4'),
    ('boxmuller_float', '<f4'),
    ('boxmuller_double', '<f8'),
], align=True)


class GaussianCache:
    """Second value of a Box-Muller pair, kept for the next request.

    Owned by the engine; a distribution transform may read, store and clear
    the two slots through these methods.
    """

    def __init__(self):
        self.clear()

    def clear(self):
        self.has_float = False
        self.has_double = False
        self.float_value = 0.0
        self.double_value = 0.0

    def put_float(self, value):
        self.float_value = float(np.float32(value))
        self.has_float = True

    def put_double(self, value):
        self.double_value = float(value)
        self.has_double = True

    def take_float(self):
        if not self.has_float:
            return None
        self.has_float = False
        return self.float_value

    def take_double(self):
        if not self.has_double:
            return None
        self.has_double = False
        return self.double_value

    def __eq__(self, other):
        if not isinstance(other, GaussianCache):
            return NotImplemented
        return ((self.has_float, self.has_double) == (other.has_float, other.has_double)
                and (not self.has_float or self.float_value == other.float_value)
                and (not self.has_double or self.double_value == other.double_value))


class XorwowEngine:
    def __init__(self, seed=0, subsequence=0, offset=0, strategy=None):
        self.strategy = strategy
        self.x = list(X_INIT)
        self.d = D_INIT

        seed = operator.index(seed) & MASK64
        s0 = (seed & MASK32) ^ SEED_XOR_LO
        s1 = (seed >> 32) ^ SEED_XOR_HI
        t0 = (SEED_MUL_LO * s0) & MASK32
        t1 = (SEED_MUL_HI * s1) & MASK32
        self.x[0] = (self.x[0] + t0) & MASK32
        self.x[1] ^= t0
        self.x[2] = (self.x[2] + t1) & MASK32
        self.x[3] ^= t1
        self.x[4] = (self.x[4] + t0) & MASK32
        self.d = (self.d + t1 + t0) & MASK32

        self.discard_subsequence(subsequence)
        self.discard(offset)

        self.gaussian_cache = GaussianCache()

    def next(self):
        x = self.x
        t = x[0] ^ (x[0] >> 2)
        x4 = x[4]
        x[0] = x[1]
        x[1] = x[2]
        x[2] = x[3]
        x[3] = x4
        x[4] = (x4 ^ ((x4 << 4) & MASK32)) ^ (t ^ ((t << 1) & MASK32))

        self.d = (self.d + WEYL_INCREMENT) & MASK32
        return (self.d + x[4]) & MASK32

    __call__ = next

    def discard(self, offset):
        """Skip `offset` outputs."""
        offset = check_u64('offset', offset)
        if offset:
            v = jump(words_to_int(self.x), offset, tables.step_matrices(), self.strategy)
            self.x = int_to_words(v)
        # the Weyl sequence is additive, n steps add n * increment
        self.d = (self.d + (offset & MASK32) * WEYL_INCREMENT) & MASK32

    def discard_subsequence(self, subsequence):
        """Skip `subsequence` * 2^67 outputs."""
        subsequence = check_u64('subsequence', subsequence)
        if subsequence:
            v = jump(words_to_int(self.x), subsequence, tables.sequence_matrices(), self.strategy)
            self.x = int_to_words(v)
        # d is unchanged: 2^67 steps add a multiple of 2^32

    def state(self):
        return tuple(self.x), self.d

    @classmethod
    def from_state(cls, x, d, strategy=None):
        x = list(x)
        if len(x) != len(X_INIT):
            raise ValueError(f"state needs {len(X_INIT)} words, got {len(x)}")
        engine = cls.__new__(cls)
        engine.strategy = strategy
        engine.x = [int(w) & MASK32 for w in x]
        engine.d = int(d) & MASK32
        engine.gaussian_cache = GaussianCache()
        return engine

    def copy(self):
        other = self.from_state(self.x, self.d, self.strategy)
        cache = self.gaussian_cache
        if cache.has_float:
            other.gaussian_cache.put_float(cache.float_value)
        if cache.has_double:
            other.gaussian_cache.put_double(cache.double_value)
        return other

    def to_bytes(self):
        rec = np.zeros((), dtype=STATE_DTYPE)
        rec['x'] = self.x
        rec['d'] = self.d
        cache = self.gaussian_cache
        rec['boxmuller_float_state'] = int(cache.has_float)
        rec['boxmuller_double_state'] = int(cache.has_double)
        rec['boxmuller_float'] = cache.float_value
        rec['boxmuller_double'] = cache.double_value
        return rec.tobytes()

    @classmethod
    def from_bytes(cls, data, strategy=None):
        if len(data) != STATE_DTYPE.itemsize:
            raise ValueError(f"serialized state must be {STATE_DTYPE.itemsize} bytes, got {len(data)}")
        rec = np.frombuffer(data, dtype=STATE_DTYPE)[0]
        engine = cls.from_state(rec['x'], rec['d'], strategy)
        if rec['boxmuller_float_state']:
            engine.gaussian_cache.put_float(rec['boxmuller_float'])
        if rec['boxmuller_double_state']:
            engine.gaussian_cache.put_double(rec['boxmuller_double'])
        return engine

    def __eq__(self, other):
        if not isinstance(other, XorwowEngine):
            return NotImplemented
        return self.state() == other.state() and self.gaussian_cache == other.gaussian_cache

    def __repr__(self):
        x = ', '.join(f"{w:08x}" for w in self.x)
        return f"XorwowEngine(x=[{x}], d={self.d:08x})"


# Functional entrypoints

def init(seed=None, subsequence=0, offset=0):
    if seed is None:
        seed = config.DEFAULT_SEED
    return XorwowEngine(seed, subsequence, offset)


def next_u32(state):
    return state.next()


def skipahead(state, offset):
    state.discard(offset)


def skipahead_subsequence(state, subsequence):
    state.discard_subsequence(subsequence)
