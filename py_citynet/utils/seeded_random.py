"""
Deterministic xoshiro256** PRNG used by all settlement and layout decisions.

The generator is seeded through splitmix64 so that any 64-bit integer,
including small ones, produces a well-mixed starting state. Instances are
passed explicitly to the code that needs them; there is no shared global.
"""

MASK64 = 0xFFFFFFFFFFFFFFFF


def _uint64(n):
    """Convert to unsigned 64-bit integer."""
    return int(n) & MASK64


def _rotl(x, k):
    return _uint64((x << k) | (x >> (64 - k)))


def splitmix64(state):
    """
    Advance a splitmix64 state.

    Returns:
        Tuple of (new_state, output)
    """
    state = _uint64(state + 0x9E3779B97F4A7C15)
    z = state
    z = _uint64((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9)
    z = _uint64((z ^ (z >> 27)) * 0x94D049BB133111EB)
    return state, z ^ (z >> 31)


class SeededRandom:
    """
    xoshiro256** generator with a small convenience API.

    Floats use the top 53 bits of each output, so a given seed yields the
    same sequence on every platform.
    """

    def __init__(self, seed):
        """Initialize from an integer seed (reduced to 64 bits)."""
        self.seed = _uint64(seed)
        self.call_count = 0

        s = self.seed
        words = []
        for _ in range(4):
            s, out = splitmix64(s)
            words.append(out)
        self.s0, self.s1, self.s2, self.s3 = words

    def next_u64(self):
        """Generate the next raw 64-bit output."""
        self.call_count += 1
        result = _uint64(_rotl(_uint64(self.s1 * 5), 7) * 9)
        t = _uint64(self.s1 << 17)

        self.s2 ^= self.s0
        self.s3 ^= self.s1
        self.s1 ^= self.s2
        self.s0 ^= self.s3

        self.s2 ^= t
        self.s3 = _rotl(self.s3, 45)

        return result

    def random(self):
        """Generate next random number in [0, 1)."""
        return (self.next_u64() >> 11) * (1.0 / 9007199254740992.0)

    def randint(self, low, high):
        """Random integer in the closed range [low, high]."""
        if high < low:
            raise ValueError(f"Empty range [{low}, {high}]")
        bound = high - low + 1
        return low + self.next_u64() % bound

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randint(0, len(seq) - 1)]

    def chance(self, probability):
        """Return True with the given probability."""
        return self.random() < probability

    def fork(self):
        """Create an independent generator seeded from this stream."""
        return SeededRandom(self.next_u64())
