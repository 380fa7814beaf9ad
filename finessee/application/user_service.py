"""User application service.

Handles visitor registration, admin login and user administration with
the primary-admin rules:
- Only a primary admin may create admins or change admin flags
- Only a primary admin may modify a primary admin
- A primary admin can never be deleted, and nobody may delete themself
"""

from dataclasses import dataclass
from typing import Any

import structlog

from finessee.application.exports import build_users_workbook
from finessee.application.wishlist_service import WishlistItem, WishlistService
from finessee.domain.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from finessee.infrastructure.models import User
from finessee.infrastructure.security import hash_password, verify_password
from finessee.infrastructure.storage import Repositories

logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6


def validate_password(password: str) -> None:
    """Reject passwords shorter than the minimum length.

    Raises:
        ValidationError: If the password is too short.
    """
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={"password": "too short"},
        )


@dataclass
class UserDetail:
    """User with their wishlist, as shown on the admin user page."""

    user: User
    wishlist: list[WishlistItem]


class UserService:
    """Application service for users and authentication."""

    def __init__(self, repos: Repositories, request_id: str | None = None) -> None:
        """Initialize service.

        Args:
            repos: Repositories of the current unit of work.
            request_id: Request ID for correlation.
        """
        self.repos = repos
        self.request_id = request_id

    # ========================================================================
    # Authentication
    # ========================================================================

    async def register(self, name: str, whatsapp_number: str, city: str = "") -> User:
        """Register a visitor, or sign in a known one.

        Args:
            name: Display name.
            whatsapp_number: Login identifier.
            city: Optional city.

        Returns:
            Existing or newly created user.

        Raises:
            ForbiddenError: If the number belongs to an admin.
        """
        user = await self.repos.users.get_by_number(whatsapp_number)
        if user is not None:
            if user.is_admin:
                raise ForbiddenError(
                    "Admin users must login through the admin page",
                    details={"is_admin": True},
                )
            return user

        user = await self.repos.users.create(
            User(name=name, whatsapp_number=whatsapp_number, city=city or "")
        )
        logger.info("User registered", user_id=user.id, request_id=self.request_id)
        return user

    async def admin_login(self, whatsapp_number: str, password: str) -> User:
        """Authenticate an administrator.

        An admin without a stored password gets the supplied one on first
        login.

        Raises:
            UnauthenticatedError: For unknown numbers, non-admins or a wrong password.
            ValidationError: If a first-login password is too short.
        """
        user = await self.repos.users.get_by_number(whatsapp_number)
        if user is None or not user.is_admin:
            raise UnauthenticatedError("Invalid admin credentials")

        if not user.password_hash:
            validate_password(password)
            await self.repos.users.update(user.id, {"password_hash": hash_password(password)})
            logger.info("Admin password set on first login", user_id=user.id)
        elif not verify_password(password, user.password_hash):
            logger.warning("Admin login failed", user_id=user.id, request_id=self.request_id)
            raise UnauthenticatedError("Invalid admin credentials")

        logger.info("Admin logged in", user_id=user.id, request_id=self.request_id)
        return user

    # ========================================================================
    # Queries
    # ========================================================================

    async def get_user(self, user_id: int) -> User:
        """Get user by ID.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self.repos.users.get(user_id)
        if user is None:
            raise NotFoundError.for_entity("User", user_id)
        return user

    async def list_users(self) -> list[User]:
        return await self.repos.users.list_all()

    async def user_detail(self, user_id: int) -> UserDetail:
        """Get a user together with their wishlist."""
        user = await self.get_user(user_id)
        wishlist = await WishlistService(self.repos, self.request_id).list_for_user(user_id)
        return UserDetail(user=user, wishlist=wishlist)

    async def export_xlsx(self) -> bytes:
        """Export all users as an XLSX workbook."""
        return build_users_workbook(await self.list_users())

    # ========================================================================
    # Administration
    # ========================================================================

    async def create_user(
        self,
        actor: User,
        name: str,
        whatsapp_number: str,
        city: str = "",
        password: str | None = None,
        is_admin: bool = False,
    ) -> User:
        """Create a user on behalf of an admin.

        A non-primary actor's request for admin rights is ignored. Created
        admins are never primary.

        Raises:
            ConflictError: If the number is already registered.
            ValidationError: If the password is too short.
        """
        password_hash = None
        if password:
            validate_password(password)
            password_hash = hash_password(password)

        user = await self.repos.users.create(
            User(
                name=name,
                whatsapp_number=whatsapp_number,
                city=city or "",
                password_hash=password_hash,
                is_admin=bool(is_admin and actor.is_primary_admin),
                is_primary_admin=False,
            )
        )
        logger.info(
            "User created",
            user_id=user.id,
            is_admin=user.is_admin,
            actor_id=actor.id,
            request_id=self.request_id,
        )
        return user

    async def update_user(self, actor: User, user_id: int, changes: dict[str, Any]) -> User:
        """Update a user on behalf of an admin.

        Args:
            actor: Admin performing the change.
            user_id: User to change.
            changes: Any of name, whatsapp_number, city, password, is_admin,
                is_primary_admin. ``None`` values are ignored.

        Returns:
            Updated user.

        Raises:
            NotFoundError: If the user does not exist.
            ForbiddenError: If a non-primary admin targets a primary admin.
            ValidationError: If the change would leave no primary admin.
            ConflictError: If the new number is already registered.
        """
        user = await self.get_user(user_id)
        if user.is_primary_admin and not actor.is_primary_admin:
            raise ForbiddenError("Only primary admin can modify another primary admin")

        updates: dict[str, Any] = {}
        for key in ("name", "whatsapp_number", "city"):
            if changes.get(key):
                updates[key] = changes[key]
        if changes.get("password"):
            validate_password(changes["password"])
            updates["password_hash"] = hash_password(changes["password"])

        # Admin flags are silently ignored unless the actor is primary.
        if actor.is_primary_admin:
            if changes.get("is_admin") is not None:
                updates["is_admin"] = bool(changes["is_admin"])
            if changes.get("is_primary_admin") is not None:
                updates["is_primary_admin"] = bool(changes["is_primary_admin"])
                if updates["is_primary_admin"]:
                    updates["is_admin"] = True

            demoting = user.is_primary_admin and (
                updates.get("is_primary_admin") is False or updates.get("is_admin") is False
            )
            if demoting and await self.repos.users.count_primary_admins() <= 1:
                raise ValidationError("Cannot remove the last primary admin")
            if updates.get("is_admin") is False:
                updates["is_primary_admin"] = False

        user = await self.repos.users.update(user_id, updates)
        logger.info(
            "User updated",
            user_id=user_id,
            fields=sorted(k for k in updates if k != "password_hash"),
            actor_id=actor.id,
            request_id=self.request_id,
        )
        return user

    async def delete_user(self, actor: User, user_id: int) -> None:
        """Delete a user with their wishlist and feedback.

        Raises:
            NotFoundError: If the user does not exist.
            ForbiddenError: If the user is a primary admin.
            ValidationError: If the actor targets themself.
        """
        user = await self.get_user(user_id)
        if user.is_primary_admin:
            raise ForbiddenError("Cannot delete primary admin")
        if user.id == actor.id:
            raise ValidationError("Cannot delete your own account")

        await self.repos.users.delete(user_id)
        logger.info("User deleted", user_id=user_id, actor_id=actor.id, request_id=self.request_id)
