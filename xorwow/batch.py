# xorwow/batch.py
# Many XORWOW streams advanced together with numpy.
# Row i of x (shape (n, 5)) and d[i] hold the state of stream i; the usual
# layout is one stream per worker, all with the same seed and with the worker
# index as subsequence.

import numpy as np

from .engine import WEYL_INCREMENT, XorwowEngine
from .jump import check_u64


class XorwowBatch:
    def __init__(self, seed, subsequences, offset=0, strategy=None):
        engines = [XorwowEngine(seed, s, offset, strategy) for s in subsequences]
        self.strategy = strategy
        self._load(engines)

    @classmethod
    def from_engines(cls, engines, strategy=None):
        batch = cls.__new__(cls)
        batch.strategy = strategy
        batch._load(engines)
        return batch

    def _load(self, engines):
        if not engines:
            raise ValueError("a batch needs at least one stream")
        self.x = np.array([e.x for e in engines], dtype=np.uint32)
        self.d = np.array([e.d for e in engines], dtype=np.uint32)

    def __len__(self):
        return len(self.d)

    def next(self):
        """Advance every stream one step, return the (n,) uint32 outputs."""
        x = self.x
        t = x[:, 0] ^ (x[:, 0] >> np.uint32(2))
        x4 = x[:, 4]
        new = (x4 ^ (x4 << np.uint32(4))) ^ (t ^ (t << np.uint32(1)))
        x[:, :4] = x[:, 1:]
        x[:, 4] = new
        self.d += np.uint32(WEYL_INCREMENT)
        return self.d + x[:, 4]

    def generate(self, count):
        """Return a (count, n) array; row k is the k-th output of every stream."""
        out = np.empty((count, len(self)), dtype=np.uint32)
        for k in range(count):
            out[k] = self.next()
        return out

    def engine(self, i):
        return XorwowEngine.from_state(self.x[i], self.d[i], self.strategy)

    def engines(self):
        return [self.engine(i) for i in range(len(self))]

    def skipahead(self, offset):
        offset = check_u64('offset', offset)
        engines = self.engines()
        for e in engines:
            e.discard(offset)
        self._load(engines)

    def skipahead_subsequence(self, subsequence):
        subsequence = check_u64('subsequence', subsequence)
        engines = self.engines()
        for e in engines:
            e.discard_subsequence(subsequence)
        self._load(engines)
