"""Shared FastAPI dependencies.

Opens one storage unit of work per request, resolves the signed-in user
from the session cookie and builds request-scoped services.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from finessee.application.feedback_service import FeedbackService
from finessee.application.import_service import ImportService
from finessee.application.user_service import UserService
from finessee.application.wishlist_service import WishlistService
from finessee.catalog.facets import FacetEngine
from finessee.catalog.service import ListingService
from finessee.domain.exceptions import ForbiddenError, UnauthenticatedError
from finessee.infrastructure.models import User
from finessee.infrastructure.storage import Repositories, get_storage

SESSION_USER_KEY = "user_id"


def get_request_id(request: Request) -> str | None:
    """Get the correlation ID set by RequestIdMiddleware."""
    return getattr(request.state, "request_id", None)


async def get_repositories() -> AsyncGenerator[Repositories, None]:
    """Open a unit of work for the request.

    Declared with function scope: the commit, and any StorageError it
    raises, completes before the response is sent.

    Yields:
        Repositories sharing one session.
    """
    async with get_storage().session() as repos:
        yield repos


RepositoriesDep = Annotated[Repositories, Depends(get_repositories, scope="function")]
RequestIdDep = Annotated[str | None, Depends(get_request_id)]


# ============================================================================
# Authentication
# ============================================================================


async def get_optional_user(request: Request, repos: RepositoriesDep) -> User | None:
    """Get the signed-in user, or None for anonymous requests."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = await repos.users.get(int(user_id))
    if user is None:
        # Stale session for a deleted user
        request.session.pop(SESSION_USER_KEY, None)
    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Get the signed-in user.

    Raises:
        UnauthenticatedError: If the request has no valid session.
    """
    if user is None:
        raise UnauthenticatedError("Not authenticated")
    return user


async def require_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Get the signed-in admin.

    Raises:
        ForbiddenError: If the user is not an admin.
    """
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
AdminUser = Annotated[User, Depends(require_admin)]


# ============================================================================
# Services
# ============================================================================


def get_listing_service(repos: RepositoriesDep, request_id: RequestIdDep) -> ListingService:
    """Get listing service with request ID."""
    return ListingService(repos.products, request_id=request_id)


def get_facet_engine(repos: RepositoriesDep) -> FacetEngine:
    return FacetEngine(repos.products)


def get_wishlist_service(repos: RepositoriesDep, request_id: RequestIdDep) -> WishlistService:
    """Get wishlist service with request ID."""
    return WishlistService(repos, request_id=request_id)


def get_user_service(repos: RepositoriesDep, request_id: RequestIdDep) -> UserService:
    """Get user service with request ID."""
    return UserService(repos, request_id=request_id)


def get_feedback_service(repos: RepositoriesDep, request_id: RequestIdDep) -> FeedbackService:
    """Get feedback service with request ID."""
    return FeedbackService(repos, request_id=request_id)


def get_import_service(repos: RepositoriesDep, request_id: RequestIdDep) -> ImportService:
    """Get import service with request ID."""
    return ImportService(repos, request_id=request_id)


ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
FacetEngineDep = Annotated[FacetEngine, Depends(get_facet_engine)]
WishlistServiceDep = Annotated[WishlistService, Depends(get_wishlist_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]
ImportServiceDep = Annotated[ImportService, Depends(get_import_service)]
