"""
Sampling utilities for memory-bounded robust statistics.

Provides reservoir sampling so that the median/MAD of a numeric column can
be estimated from a fixed-size, uniformly drawn subset of its values.
"""

import random
from typing import List, Any, Optional


class ReservoirSampler:
    """
    Reservoir sampling implementation for memory-efficient sampling.

    Maintains a fixed-size reservoir of samples from a streaming dataset,
    ensuring each item has equal probability of being included regardless
    of total dataset size.

    Uses Algorithm R (Vitter, 1985). Each sampler owns its own
    ``random.Random`` so that two samplers never share state and a given
    seed always yields the same sample.
    """

    def __init__(self, reservoir_size: int = 100000, random_seed: Optional[int] = 42):
        """
        Initialize reservoir sampler.

        Args:
            reservoir_size: Maximum number of samples to retain
            random_seed: Random seed for reproducibility (None for random)
        """
        if reservoir_size < 1:
            raise ValueError("reservoir_size must be at least 1")
        self.reservoir_size = reservoir_size
        self.reservoir: List[Any] = []
        self.items_seen = 0
        self._rng = random.Random(random_seed)

    def add(self, item: Any) -> None:
        """
        Add an item to the reservoir sample.

        For the first k items, simply add to reservoir.
        For subsequent items, randomly replace an existing item
        with probability k/n where k=reservoir_size and n=items_seen.
        """
        self.items_seen += 1

        if len(self.reservoir) < self.reservoir_size:
            self.reservoir.append(item)
        else:
            j = self._rng.randint(0, self.items_seen - 1)
            if j < self.reservoir_size:
                self.reservoir[j] = item

    def merge(self, other: "ReservoirSampler") -> None:
        """
        Merge another sampler's reservoir into this one.

        The merged reservoir is a uniform sample of the union of both
        streams: the number of slots taken from each side follows the
        hypergeometric split of the two global seen-counts, so a side that
        saw more items contributes proportionally more. Merging samplers
        that both still hold every item they saw is exact concatenation.
        """
        total_seen = self.items_seen + other.items_seen
        if (len(self.reservoir) == self.items_seen
                and len(other.reservoir) == other.items_seen
                and total_seen <= self.reservoir_size):
            self.reservoir = self.reservoir + other.reservoir
            self.items_seen = total_seen
            return

        slots = min(self.reservoir_size, total_seen)
        take_self = 0
        remaining_self, remaining_other = self.items_seen, other.items_seen
        for _ in range(slots):
            if self._rng.random() * (remaining_self + remaining_other) < remaining_self:
                take_self += 1
                remaining_self -= 1
            else:
                remaining_other -= 1

        # Each side can only give what it retained
        take_self = min(take_self, len(self.reservoir))
        take_other = min(slots - take_self, len(other.reservoir))
        take_self = min(slots - take_other, len(self.reservoir))

        merged = self._rng.sample(self.reservoir, take_self) + self._rng.sample(other.reservoir, take_other)
        self.reservoir = merged
        self.items_seen = total_seen

    def get_sample(self) -> List[Any]:
        """Get a copy of the current reservoir sample."""
        return self.reservoir.copy()

    def get_count(self) -> int:
        """Get total number of items seen (not just in reservoir)."""
        return self.items_seen

    def get_sample_size(self) -> int:
        """Get current size of reservoir sample."""
        return len(self.reservoir)

    @property
    def is_complete(self) -> bool:
        """True when every item seen is still in the reservoir."""
        return len(self.reservoir) == self.items_seen
