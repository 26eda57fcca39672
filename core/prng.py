"""Seeded pseudo-random generator for reproducible room sessions.

Two clients entering the same room code must derive the same question set
without talking to each other, so every step here is plain integer arithmetic
that gives identical results on any platform.
"""

_LCG_MULTIPLIER = 9301
_LCG_INCREMENT = 49297
_LCG_MODULUS = 233280


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _seed_text(seed) -> str:
    if isinstance(seed, float) and seed.is_integer():
        seed = int(seed)
    return str(seed)


def hash_seed(seed) -> int:
    """Fold the seed's UTF-16 code units into a non-negative 32-bit hash."""
    text = _seed_text(seed)
    data = text.encode('utf-16-le')
    hash_value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        hash_value = _to_int32(hash_value * 31 + code_unit)
    return abs(hash_value)


class Prng:
    """Linear congruential generator seeded from a string or number."""

    def __init__(self, seed):
        self.seed = seed
        self.state = hash_seed(seed)

    def next(self) -> float:
        """Return a float in [0, 1)."""
        self.state = (self.state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        return self.state / _LCG_MODULUS

    # Lets a Prng be passed wherever a random.Random is accepted
    random = next

    def next_int(self, min_value: int, max_value: int) -> int:
        """Return an integer in [min_value, max_value]."""
        return int(self.next() * (max_value - min_value + 1)) + min_value

    def choice(self, seq):
        return seq[self.next_int(0, len(seq) - 1)]

    def shuffle(self, seq) -> list:
        """Fisher-Yates shuffle into a new list; the input is left untouched."""
        result = list(seq)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result
