"""Process-wide in-memory store.

Holds products, users, wishlist entries and feedback in dictionaries with
monotonically increasing id counters. Used by the memory storage backend
for local runs and tests. Mutations never await, so each repository call
is atomic with respect to the event loop.
"""

import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field

from finessee.catalog.models import Product
from finessee.infrastructure.models import Feedback, User, WishlistEntry


@dataclass
class MemoryStore:
    """Tables of the in-memory backend."""

    products: dict[int, Product] = field(default_factory=dict)
    users: dict[int, User] = field(default_factory=dict)
    wishlist: dict[tuple[int, int], WishlistEntry] = field(default_factory=dict)
    feedback: dict[int, Feedback] = field(default_factory=dict)
    _counters: dict[str, Iterator[int]] = field(default_factory=dict)

    def next_id(self, table: str) -> int:
        """Allocate the next id for a table. Ids are never reused."""
        if table not in self._counters:
            self._counters[table] = itertools.count(1)
        return next(self._counters[table])

    def cascade_product(self, product_id: int) -> None:
        """Remove rows that reference a deleted product."""
        for key in [k for k in self.wishlist if k[1] == product_id]:
            del self.wishlist[key]
        for item in self.feedback.values():
            if item.product_id == product_id:
                item.product_id = None

    def cascade_user(self, user_id: int) -> None:
        """Remove rows that reference a deleted user."""
        for key in [k for k in self.wishlist if k[0] == user_id]:
            del self.wishlist[key]
        for feedback_id in [f.id for f in self.feedback.values() if f.user_id == user_id]:
            del self.feedback[feedback_id]
