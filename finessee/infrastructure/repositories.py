"""Repositories for users, wishlists and feedback.

Each repository has a SQLAlchemy implementation and an in-memory
implementation over ``MemoryStore``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from finessee.catalog.models import Product
from finessee.domain.exceptions import ConflictError, NotFoundError
from finessee.infrastructure.memory_store import MemoryStore
from finessee.infrastructure.models import Feedback, User, WishlistEntry


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _duplicate_number(whatsapp_number: str) -> ConflictError:
    return ConflictError(
        "User with this WhatsApp number already exists",
        details={"whatsapp_number": whatsapp_number},
    )


def _duplicate_entry(user_id: int, product_id: int) -> ConflictError:
    return ConflictError(
        "Product already in wishlist",
        details={"user_id": user_id, "product_id": product_id},
    )


# ============================================================================
# Interfaces
# ============================================================================


class UserRepository(ABC):
    """Storage interface for users."""

    @abstractmethod
    async def get(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_by_number(self, whatsapp_number: str) -> User | None: ...

    @abstractmethod
    async def list_all(self) -> list[User]:
        """Get all users ordered by id."""

    @abstractmethod
    async def count_primary_admins(self) -> int: ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persist a new user.

        Raises:
            ConflictError: If the WhatsApp number is already registered.
        """

    @abstractmethod
    async def update(self, user_id: int, changes: dict[str, Any]) -> User:
        """Apply changes to a user.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new WhatsApp number is already registered.
        """

    @abstractmethod
    async def delete(self, user_id: int) -> bool:
        """Delete a user with their wishlist entries and feedback."""


class WishlistRepository(ABC):
    """Storage interface for wishlist entries."""

    @abstractmethod
    async def add(self, user_id: int, product_id: int) -> WishlistEntry:
        """Insert an entry as a single atomic operation.

        Raises:
            ConflictError: If the pair already exists.
        """

    @abstractmethod
    async def remove(self, user_id: int, product_id: int) -> bool:
        """Delete an entry. Returns False when there was none."""

    @abstractmethod
    async def exists(self, user_id: int, product_id: int) -> bool: ...

    @abstractmethod
    async def list_with_products(self, user_id: int) -> list[tuple[WishlistEntry, Product]]:
        """Get a user's entries joined with their products, by entry id."""


class FeedbackRepository(ABC):
    """Storage interface for feedback."""

    @abstractmethod
    async def get(self, feedback_id: int) -> Feedback | None: ...

    @abstractmethod
    async def list_all(self) -> list[Feedback]:
        """Get all feedback, newest first."""

    @abstractmethod
    async def list_published(self) -> list[Feedback]:
        """Get published feedback, newest first."""

    @abstractmethod
    async def create(self, feedback: Feedback) -> Feedback: ...

    @abstractmethod
    async def update(self, feedback_id: int, changes: dict[str, Any]) -> Feedback:
        """Apply changes to feedback.

        Raises:
            NotFoundError: If the feedback does not exist.
        """

    @abstractmethod
    async def delete(self, feedback_id: int) -> bool: ...


# ============================================================================
# SQLAlchemy implementations
# ============================================================================


class SqlUserRepository(UserRepository):
    """User repository backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_number(self, whatsapp_number: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.whatsapp_number == whatsapp_number)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def count_primary_admins(self) -> int:
        result = await self.session.execute(
            select(func.count(User.id)).where(User.is_primary_admin.is_(True))
        )
        return result.scalar_one()

    async def create(self, user: User) -> User:
        if await self.get_by_number(user.whatsapp_number) is not None:
            raise _duplicate_number(user.whatsapp_number)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise _duplicate_number(user.whatsapp_number) from e
        return user

    async def update(self, user_id: int, changes: dict[str, Any]) -> User:
        user = await self.get(user_id)
        if user is None:
            raise NotFoundError.for_entity("User", user_id)

        new_number = changes.get("whatsapp_number")
        if new_number is not None and new_number != user.whatsapp_number:
            if await self.get_by_number(new_number) is not None:
                raise _duplicate_number(new_number)

        for key, value in changes.items():
            setattr(user, key, value)
        await self.session.flush()
        return user

    async def delete(self, user_id: int) -> bool:
        user = await self.get(user_id)
        if user is None:
            return False

        await self.session.execute(delete(WishlistEntry).where(WishlistEntry.user_id == user_id))
        await self.session.execute(delete(Feedback).where(Feedback.user_id == user_id))
        await self.session.delete(user)
        await self.session.flush()
        return True


class SqlWishlistRepository(WishlistRepository):
    """Wishlist repository backed by an async SQLAlchemy session.

    ``add`` relies on the (user_id, product_id) unique constraint instead of
    a check-then-insert, so concurrent adds of the same pair cannot both
    succeed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, user_id: int, product_id: int) -> WishlistEntry:
        values = {"user_id": user_id, "product_id": product_id, "created_at": _utcnow()}
        dialect = self.session.bind.dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = (
                insert(WishlistEntry)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id", "product_id"])
                .returning(WishlistEntry)
            )
            result = await self.session.execute(stmt)
            entry = result.scalar_one_or_none()
            if entry is None:
                raise _duplicate_entry(user_id, product_id)
            return entry

        entry = WishlistEntry(**values)
        try:
            async with self.session.begin_nested():
                self.session.add(entry)
        except IntegrityError as e:
            raise _duplicate_entry(user_id, product_id) from e
        return entry

    async def remove(self, user_id: int, product_id: int) -> bool:
        result = await self.session.execute(
            delete(WishlistEntry).where(
                WishlistEntry.user_id == user_id,
                WishlistEntry.product_id == product_id,
            )
        )
        return result.rowcount > 0

    async def exists(self, user_id: int, product_id: int) -> bool:
        result = await self.session.execute(
            select(WishlistEntry.id).where(
                WishlistEntry.user_id == user_id,
                WishlistEntry.product_id == product_id,
            )
        )
        return result.first() is not None

    async def list_with_products(self, user_id: int) -> list[tuple[WishlistEntry, Product]]:
        result = await self.session.execute(
            select(WishlistEntry, Product)
            .join(Product, Product.id == WishlistEntry.product_id)
            .where(WishlistEntry.user_id == user_id)
            .order_by(WishlistEntry.id)
        )
        return [(entry, product) for entry, product in result.all()]


class SqlFeedbackRepository(FeedbackRepository):
    """Feedback repository backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, feedback_id: int) -> Feedback | None:
        return await self.session.get(Feedback, feedback_id)

    async def list_all(self) -> list[Feedback]:
        result = await self.session.execute(
            select(Feedback).order_by(Feedback.created_at.desc(), Feedback.id.desc())
        )
        return list(result.scalars().all())

    async def list_published(self) -> list[Feedback]:
        result = await self.session.execute(
            select(Feedback)
            .where(Feedback.is_published.is_(True))
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        )
        return list(result.scalars().all())

    async def create(self, feedback: Feedback) -> Feedback:
        self.session.add(feedback)
        await self.session.flush()
        return feedback

    async def update(self, feedback_id: int, changes: dict[str, Any]) -> Feedback:
        feedback = await self.get(feedback_id)
        if feedback is None:
            raise NotFoundError.for_entity("Feedback", feedback_id)
        for key, value in changes.items():
            setattr(feedback, key, value)
        feedback.updated_at = _utcnow()
        await self.session.flush()
        return feedback

    async def delete(self, feedback_id: int) -> bool:
        feedback = await self.get(feedback_id)
        if feedback is None:
            return False
        await self.session.delete(feedback)
        await self.session.flush()
        return True


# ============================================================================
# In-memory implementations
# ============================================================================


class InMemoryUserRepository(UserRepository):
    """User repository over a shared ``MemoryStore``."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def get(self, user_id: int) -> User | None:
        return self.store.users.get(user_id)

    async def get_by_number(self, whatsapp_number: str) -> User | None:
        for user in self.store.users.values():
            if user.whatsapp_number == whatsapp_number:
                return user
        return None

    async def list_all(self) -> list[User]:
        return sorted(self.store.users.values(), key=lambda u: u.id)

    async def count_primary_admins(self) -> int:
        return sum(1 for u in self.store.users.values() if u.is_primary_admin)

    async def create(self, user: User) -> User:
        if await self.get_by_number(user.whatsapp_number) is not None:
            raise _duplicate_number(user.whatsapp_number)
        user.id = self.store.next_id("users")
        user.city = user.city or ""
        user.is_admin = bool(user.is_admin)
        user.is_primary_admin = bool(user.is_primary_admin)
        user.created_at = user.created_at or _utcnow()
        self.store.users[user.id] = user
        return user

    async def update(self, user_id: int, changes: dict[str, Any]) -> User:
        user = self.store.users.get(user_id)
        if user is None:
            raise NotFoundError.for_entity("User", user_id)

        new_number = changes.get("whatsapp_number")
        if new_number is not None and new_number != user.whatsapp_number:
            if await self.get_by_number(new_number) is not None:
                raise _duplicate_number(new_number)

        for key, value in changes.items():
            setattr(user, key, value)
        return user

    async def delete(self, user_id: int) -> bool:
        if self.store.users.pop(user_id, None) is None:
            return False
        self.store.cascade_user(user_id)
        return True


class InMemoryWishlistRepository(WishlistRepository):
    """Wishlist repository keyed by (user_id, product_id)."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def add(self, user_id: int, product_id: int) -> WishlistEntry:
        key = (user_id, product_id)
        if key in self.store.wishlist:
            raise _duplicate_entry(user_id, product_id)
        entry = WishlistEntry(
            id=self.store.next_id("wishlists"),
            user_id=user_id,
            product_id=product_id,
            created_at=_utcnow(),
        )
        self.store.wishlist[key] = entry
        return entry

    async def remove(self, user_id: int, product_id: int) -> bool:
        return self.store.wishlist.pop((user_id, product_id), None) is not None

    async def exists(self, user_id: int, product_id: int) -> bool:
        return (user_id, product_id) in self.store.wishlist

    async def list_with_products(self, user_id: int) -> list[tuple[WishlistEntry, Product]]:
        rows = []
        for (owner_id, product_id), entry in self.store.wishlist.items():
            product = self.store.products.get(product_id)
            if owner_id == user_id and product is not None:
                rows.append((entry, product))
        rows.sort(key=lambda row: row[0].id)
        return rows


class InMemoryFeedbackRepository(FeedbackRepository):
    """Feedback repository over a shared ``MemoryStore``."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    def _newest_first(self, items: list[Feedback]) -> list[Feedback]:
        return sorted(items, key=lambda f: (f.created_at, f.id), reverse=True)

    async def get(self, feedback_id: int) -> Feedback | None:
        return self.store.feedback.get(feedback_id)

    async def list_all(self) -> list[Feedback]:
        return self._newest_first(list(self.store.feedback.values()))

    async def list_published(self) -> list[Feedback]:
        return self._newest_first([f for f in self.store.feedback.values() if f.is_published])

    async def create(self, feedback: Feedback) -> Feedback:
        now = _utcnow()
        feedback.id = self.store.next_id("feedback")
        feedback.is_approved = bool(feedback.is_approved)
        feedback.is_published = bool(feedback.is_published)
        feedback.created_at = feedback.created_at or now
        feedback.updated_at = now
        self.store.feedback[feedback.id] = feedback
        return feedback

    async def update(self, feedback_id: int, changes: dict[str, Any]) -> Feedback:
        feedback = self.store.feedback.get(feedback_id)
        if feedback is None:
            raise NotFoundError.for_entity("Feedback", feedback_id)
        for key, value in changes.items():
            setattr(feedback, key, value)
        feedback.updated_at = _utcnow()
        return feedback

    async def delete(self, feedback_id: int) -> bool:
        return self.store.feedback.pop(feedback_id, None) is not None
