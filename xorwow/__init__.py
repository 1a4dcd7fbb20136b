# xorwow
# XORWOW pseudorandom engine with GF(2) jump-ahead for parallel streams.

from .engine import (GaussianCache, XorwowEngine, init, next_u32, skipahead,
                     skipahead_subsequence)
from .batch import XorwowBatch

__version__ = '0.1.0'
