"""Fixed and Adaptive Bloom Filter implementations.

This module implements two probabilistic data structures for space-efficient
set membership testing:

1. BloomFilter: Fixed-size filter, bit count and hash count chosen up front
2. AdaptiveBloomFilter: Filter that grows its bit array as load increases,
   rebuilding itself from a log of every inserted item

Both implementations never produce false negatives. The module uses xxHash
for the underlying hash primitive and bitarray for compact bit storage.

Mathematical Foundation:
    - False positive probability: P ≈ (1 - e^(-kn/m))^k
    - Optimal bit count: m ≈ n × |ln(P)| / (ln(2)²) where n is capacity
    - Optimal hash functions: k ≈ (m / n) × ln(2)

Requirements:
    - Python 3.6+
    - bitarray >= 2.0.0: Efficient bit array operations
    - xxhash >= 3.0.0: Fast non-cryptographic hashing
"""
import copy
import logging
import math
from functools import partial

import xxhash

try:
    import bitarray
except ImportError:
    raise ImportError('pybloom_adaptive requires bitarray >= 2.0.0')

logger = logging.getLogger(__name__)


class ConstructionError(ValueError):
    """Raised when a filter is configured with an unusable size or hash count."""


def make_bitarray(num_bits):
    """Allocate a zeroed bit array of ``num_bits`` bits.

    Bit arrays are never resized in place: a filter that needs more bits
    allocates a fresh one and replays its items into it, because the
    index of every item depends on the array length.
    """
    bits = bitarray.bitarray(num_bits, endian='little')
    bits.setall(False)
    return bits


def _is_positive_int(value):
    # bool is an int subclass but never a meaningful size
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _key_bytes(key):
    # Normalize key to bytes for consistent hashing
    if isinstance(key, str):
        return key.encode('utf-8')
    if isinstance(key, bytes):
        return key
    return str(key).encode('utf-8')


def seeded_hash(key, seed=0):
    """Hash a key with xxHash64 under the given seed.

    Distinct seeds give quasi-independent hash functions over the same key,
    which is how a single primitive stands in for a family of k hashes.

    Args:
        key: The element to hash (str, bytes, or any object with __str__)
        seed (int, optional): Seed value in [0, 2**64). Default is 0.

    Returns:
        int: Unsigned 64-bit hash value. Callers reduce it modulo their
            bit array length.

    Example:
        >>> seeded_hash("apple", 1) == seeded_hash("apple", 1)
        True
    """
    return xxhash.xxh64_intdigest(_key_bytes(key), seed=seed)


def make_hashfuncs(num_hashes):
    """Build an ordered family of ``num_hashes`` seeded hash functions.

    Function ``i`` hashes its key with seed ``i``, so two families of the
    same length are interchangeable and filters built from them agree on
    every query.

    Args:
        num_hashes (int): Number of hash functions (k in literature).

    Returns:
        list: Callables mapping a key to an unsigned integer.

    Raises:
        ConstructionError: If num_hashes is not a positive integer.
    """
    if not _is_positive_int(num_hashes):
        raise ConstructionError("Number of hash functions must be > 0")
    return [partial(seeded_hash, seed=i) for i in range(num_hashes)]


def false_positive_probability(num_hashes, count, num_bits):
    """Estimate the false positive rate (1 - e^(-kn/m))^k.

    Args:
        num_hashes (int): k, hash functions per item
        count (int): n, items inserted so far
        num_bits (int): m, size of the bit array

    Returns:
        float: Probability in [0, 1]. Exactly 0.0 for an empty filter.
    """
    if count <= 0:
        return 0.0
    fill = 1.0 - math.exp(-num_hashes * count / num_bits)
    return min(1.0, max(0.0, fill ** num_hashes))


class BloomFilter:
    """A Bloom filter with a fixed bit count and a fixed number of hashes.

    Hash ``i`` of a key is ``seeded_hash(key, i) % num_bits``. Bits only
    ever go from False to True, so a key that was added is always reported
    as present.
    """

    def __init__(self, num_bits, num_hashes):
        """Initialize an empty Bloom filter.

        Args:
            num_bits (int): Size of the bit array (m). Must be > 0.
            num_hashes (int): Number of hash functions (k). Must be > 0.

        Raises:
            ConstructionError: If either argument is not a positive integer.

        Example:
            >>> bf = BloomFilter(num_bits=1000, num_hashes=3)
            >>> bf.add("test")
            >>> "test" in bf
            True
        """
        if not _is_positive_int(num_bits):
            raise ConstructionError("Number of bits must be > 0")
        if not _is_positive_int(num_hashes):
            raise ConstructionError("Number of hash functions must be > 0")

        self.num_bits = num_bits
        self.num_hashes = num_hashes
        self.count = 0
        self.bitarray = make_bitarray(num_bits)
        logger.debug("BloomFilter created: num_bits=%d, num_hashes=%d",
                     num_bits, num_hashes)

    @classmethod
    def from_capacity(cls, capacity, error_rate=0.001):
        """Size a filter for ``capacity`` items at the given error rate.

        Mathematical Formulas Used:
            - Total bits: m = ceil(n × |ln(P)| / (ln(2))²)
            - Hash functions: k = max(1, round(m / n × ln(2)))

        Args:
            capacity (int): Expected number of elements. Must be > 0.
            error_rate (float, optional): Target false positive probability.
                Must be between 0 and 1 (exclusive). Default is 0.001.

        Returns:
            BloomFilter: An empty filter sized for the workload.

        Raises:
            ConstructionError: If capacity or error_rate is out of range.

        Example:
            >>> bf = BloomFilter.from_capacity(1000, 0.01)
            >>> bf.num_bits, bf.num_hashes
            (9586, 7)
        """
        if not (0 < error_rate < 1):
            raise ConstructionError("Error_Rate must be between 0 and 1.")
        if not capacity > 0:
            raise ConstructionError("Capacity must be > 0")

        num_bits = int(math.ceil(
            (capacity * abs(math.log(error_rate))) / (math.log(2) ** 2)))
        num_hashes = max(1, int(round(num_bits / capacity * math.log(2))))
        return cls(num_bits, num_hashes)

    def _indexes(self, key):
        num_bits = self.num_bits
        for seed in range(self.num_hashes):
            yield seeded_hash(key, seed) % num_bits

    def add(self, key):
        """Add an element to the Bloom filter.

        Sets the k bits selected by the key's hashes. Adding the same key
        twice is harmless but still counts towards ``len()``, since the
        false positive estimate is driven by insertions.

        Args:
            key: The element to add (str, bytes, or any object with __str__)
        """
        bitarray = self.bitarray
        for index in self._indexes(key):
            bitarray[index] = True
        self.count += 1

    def contains(self, key):
        """Test whether an element may be in the Bloom filter.

        Returns:
            bool: False if the element is definitely absent, True if it was
                added or is a false positive.
        """
        bitarray = self.bitarray
        for index in self._indexes(key):
            if not bitarray[index]:
                return False  # Definitely not in set
        return True

    def __contains__(self, key):
        return self.contains(key)

    def __len__(self):
        """Return the number of add() calls made on this filter."""
        return self.count

    def estimate_false_positive_rate(self):
        """Estimate the current false positive rate from k, n and m.

        Returns:
            float: (1 - e^(-kn/m))^k for the insertions made so far.
        """
        return false_positive_probability(self.num_hashes, self.count, self.num_bits)

    def copy(self):
        """Create an independent copy of this Bloom filter.

        Example:
            >>> bf1 = BloomFilter(100, 3)
            >>> bf1.add("apple")
            >>> bf2 = bf1.copy()
            >>> bf2.add("banana")
            >>> "banana" in bf1
            False
        """
        new_filter = BloomFilter(self.num_bits, self.num_hashes)
        new_filter.bitarray = self.bitarray.copy()
        new_filter.count = self.count
        return new_filter

    def _check_compatible(self, other, operation):
        if self.num_bits != other.num_bits or self.num_hashes != other.num_hashes:
            raise ValueError(
                "%s filters requires both filters to have the same number of "
                "bits and hash functions" % operation)

    def union(self, other):
        """Calculate the union of two Bloom filters.

        The result reports every element present in either filter. This is
        the bitwise OR of the two bit arrays.

        Args:
            other (BloomFilter): Filter with the same num_bits and num_hashes.

        Returns:
            BloomFilter: A new filter representing the union

        Raises:
            ValueError: If the filters have different shapes

        Note:
            The count of the result is copied from this filter and is only
            an approximation, overlaps cannot be determined.
        """
        self._check_compatible(other, "Unioning")
        new_bloom = self.copy()
        new_bloom.bitarray = new_bloom.bitarray | other.bitarray
        return new_bloom

    def __or__(self, other):
        return self.union(other)

    def intersection(self, other):
        """Calculate the intersection of two Bloom filters.

        This is the bitwise AND of the two bit arrays. Elements present in
        both inputs are always reported; the false positive rate of the
        result can be higher than that of either input.

        Raises:
            ValueError: If the filters have different shapes
        """
        self._check_compatible(other, "Intersecting")
        new_bloom = self.copy()
        new_bloom.bitarray = new_bloom.bitarray & other.bitarray
        return new_bloom

    def __and__(self, other):
        return self.intersection(other)


class AdaptiveBloomFilter:
    """A Bloom filter that grows its bit array as more elements are added.

    Every inserted element is kept in an item log. When the load crosses
    the configured threshold, ``add`` allocates a larger bit array and
    replays the whole log into it before inserting the new element, so no
    element is ever lost to a resize.

    The hash family is an ordered list of callables ``key -> int``; index
    ``i`` of a key is ``hashfuncs[i](key) % current_size``.

    Class Attributes:
        DEFAULT_GROWTH_FACTOR (int): Bit array multiplier applied on resize
        DEFAULT_LOAD_FACTOR (float): Items per bit that triggers a resize
    """
    DEFAULT_GROWTH_FACTOR = 2
    DEFAULT_LOAD_FACTOR = 1.0

    def __init__(self, num_bits, hashfuncs, growth_factor=DEFAULT_GROWTH_FACTOR,
                 load_factor=DEFAULT_LOAD_FACTOR, max_error_rate=None):
        """Initialize an empty adaptive Bloom filter.

        Args:
            num_bits (int): Initial size of the bit array. Must be > 0.
            hashfuncs (list): Ordered hash callables, at least one.
            growth_factor (float, optional): Multiplier for the new size when
                the filter resizes. Must be > 1. Default is 2.
            load_factor (float, optional): Resize once the item count reaches
                ``load_factor × num_bits``. Must be > 0. Default is 1.0.
            max_error_rate (float, optional): If given, also resize when the
                estimated false positive rate exceeds it. Must be between 0
                and 1 (exclusive). Default is None (load driven only).

        Raises:
            ConstructionError: If any argument is out of range.

        Example:
            >>> abf = AdaptiveBloomFilter(10, make_hashfuncs(1))
            >>> for i in range(11):
            ...     abf.add("item%d" % i)
            >>> abf.current_size
            20
        """
        if not _is_positive_int(num_bits):
            raise ConstructionError("Number of bits must be > 0")
        try:
            hashfuncs = list(hashfuncs)
        except TypeError:
            raise ConstructionError("Hash functions must be a sequence of callables")
        if not hashfuncs:
            raise ConstructionError("At least one hash function is required")
        if not all(callable(h) for h in hashfuncs):
            raise ConstructionError("Hash functions must be callable")
        if not (math.isfinite(growth_factor) and growth_factor > 1):
            raise ConstructionError("Growth factor must be a finite number > 1")
        if not (math.isfinite(load_factor) and load_factor > 0):
            raise ConstructionError("Load factor must be a finite number > 0")
        if max_error_rate is not None and not (0 < max_error_rate < 1):
            raise ConstructionError("Max error rate must be between 0 and 1.")

        self.num_bits = num_bits
        self.hashfuncs = hashfuncs
        self.growth_factor = growth_factor
        self.load_factor = load_factor
        self.max_error_rate = max_error_rate
        self.resize_count = 0
        self.items = []
        self.bitarray = make_bitarray(num_bits)
        logger.debug("AdaptiveBloomFilter created: num_bits=%d, num_hashes=%d",
                     num_bits, len(hashfuncs))

    @classmethod
    def with_seeds(cls, num_bits, num_hashes, **options):
        """Build a filter whose hash family comes from make_hashfuncs().

        Example:
            >>> abf = AdaptiveBloomFilter.with_seeds(10000, 3)
            >>> abf.num_hashes
            3
        """
        return cls(num_bits, make_hashfuncs(num_hashes), **options)

    @property
    def num_hashes(self):
        return len(self.hashfuncs)

    @property
    def current_size(self):
        """Current length of the bit array."""
        return self.num_bits

    @property
    def false_positive_rate(self):
        return self.estimate_false_positive_rate()

    def logged_items(self):
        """Return the inserted elements, oldest first, as a tuple."""
        return tuple(self.items)

    def _set_bits(self, bitarray, num_bits, key):
        for hashfn in self.hashfuncs:
            bitarray[hashfn(key) % num_bits] = True

    def add(self, key):
        """Add an element, resizing first if the filter is due to grow.

        Args:
            key: The element to add. A deep copy is kept in the item log
                so later changes to a mutable key cannot alter what a
                resize replays.
        """
        if self.should_resize():
            self.resize(self.calculate_new_size())

        key = copy.deepcopy(key)
        self._set_bits(self.bitarray, self.num_bits, key)
        self.items.append(key)

    def contains(self, key):
        """Test whether an element may be in the filter.

        Returns:
            bool: False if the element is definitely absent, True if it was
                added or is a false positive.
        """
        bitarray = self.bitarray
        num_bits = self.num_bits
        for hashfn in self.hashfuncs:
            if not bitarray[hashfn(key) % num_bits]:
                return False
        return True

    def __contains__(self, key):
        return self.contains(key)

    def __len__(self):
        return len(self.items)

    def should_resize(self):
        """Decide whether the next add() must grow the bit array first.

        Returns:
            bool: True once the item count reaches load_factor × num_bits,
                or, when max_error_rate is configured, once the estimated
                false positive rate exceeds it.
        """
        if len(self.items) >= self.load_factor * self.num_bits:
            return True
        if self.max_error_rate is not None:
            return self.estimate_false_positive_rate() > self.max_error_rate
        return False

    def calculate_new_size(self):
        """Return the size the next resize grows to (always > current size)."""
        return max(self.num_bits + 1,
                   int(math.ceil(self.num_bits * self.growth_factor)))

    def resize(self, new_size):
        """Rebuild the filter on a larger bit array.

        A fresh array is allocated and every logged item is hashed into it
        against the new size. The item log itself is left untouched.

        Args:
            new_size (int): New bit array length, strictly larger than the
                current one.

        Raises:
            ValueError: If new_size is not an integer larger than the current
                size. Shrinking would make earlier items unreachable.

        Time Complexity:
            O(n × k) where n is the number of logged items
        """
        if not _is_positive_int(new_size) or new_size <= self.num_bits:
            raise ValueError(
                "New size must be an integer greater than the current size "
                "(%d), got %r" % (self.num_bits, new_size))

        bitarray = make_bitarray(new_size)
        for key in self.items:
            self._set_bits(bitarray, new_size, key)

        old_size = self.num_bits
        self.bitarray = bitarray
        self.num_bits = new_size
        self.resize_count += 1
        logger.debug("AdaptiveBloomFilter resized: %d -> %d bits, items=%d, "
                     "estimated_fpr=%.6f", old_size, new_size, len(self.items),
                     self.estimate_false_positive_rate())

    def estimate_false_positive_rate(self):
        """Estimate the current false positive rate from k, n and m.

        Returns:
            float: (1 - e^(-kn/m))^k in [0, 1]. Side-effect free.
        """
        return false_positive_probability(self.num_hashes, len(self.items),
                                          self.num_bits)


if __name__ == "__main__":
    import doctest

    doctest.testmod()
