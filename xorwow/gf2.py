# xorwow/gf2.py
# Bit-matrix algebra over GF(2) for the 160-bit XORWOW shift register.
#
# A state vector is a single Python int of STATE_BITS bits: bit 32*i + j is
# bit j of word x[i].
# A matrix is a tuple of STATE_BITS ints; entry k is the image of basis bit k
# (the matrix "column" for that bit).  Multiplying a vector XORs together the
# columns of its set bits, so addition is XOR and multiplication is AND.

N_WORDS = 5
WORD_BITS = 32
STATE_BITS = N_WORDS * WORD_BITS
MASK32 = 0xFFFFFFFF
MASK_STATE = (1 << STATE_BITS) - 1


def words_to_int(words):
    v = 0
    for i, w in enumerate(words):
        v |= (w & MASK32) << (WORD_BITS * i)
    return v


def int_to_words(v):
    return [(v >> (WORD_BITS * i)) & MASK32 for i in range(N_WORDS)]


def identity():
    return tuple(1 << k for k in range(STATE_BITS))


def mul_mat_vec(m, v):
    """Return m . v over GF(2)."""
    r = 0
    while v:
        low = v & -v
        r ^= m[low.bit_length() - 1]
        v ^= low
    return r


def mul_mat_mat(a, b):
    """Return b . a: every column of a pushed through b.

    mul_mat_mat(a, a) squares a.
    """
    return tuple(mul_mat_vec(b, col) for col in a)


def mat_pow(m, n):
    # plain square-and-multiply, independent of the jump tables
    result = identity()
    base = m
    while n > 0:
        if n & 1:
            result = mul_mat_mat(result, base)
        base = mul_mat_mat(base, base)
        n >>= 1
    return result


def matrix_from_map(step):
    """Build the matrix of a linear map given as a function on state ints."""
    return tuple(step(1 << k) & MASK_STATE for k in range(STATE_BITS))


def rank(m):
    # Gaussian elimination over GF(2) with the columns as integer masks
    rows = [c for c in m if c]
    r = 0
    for bit in reversed(range(STATE_BITS)):
        sel = None
        for i in range(r, len(rows)):
            if (rows[i] >> bit) & 1:
                sel = i
                break
        if sel is None:
            continue
        rows[r], rows[sel] = rows[sel], rows[r]
        for i in range(len(rows)):
            if i != r and (rows[i] >> bit) & 1:
                rows[i] ^= rows[r]
        r += 1
        if r == len(rows):
            break
    return r


def matrix_to_words(m):
    """Flatten to the 32-bit word layout of the persisted tables.

    Word k * N_WORDS + w is word w of the image of basis bit k.
    """
    out = []
    for col in m:
        out.extend(int_to_words(col))
    return out


def matrix_from_words(words):
    words = list(words)
    if len(words) != STATE_BITS * N_WORDS:
        raise ValueError(f"expected {STATE_BITS * N_WORDS} words, got {len(words)}")
    return tuple(words_to_int(words[k * N_WORDS:(k + 1) * N_WORDS])
                 for k in range(STATE_BITS))
