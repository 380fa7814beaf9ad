"""Feedback application service.

Customers submit reviews; admins approve, publish, annotate and delete
them. Only published reviews are visible to the public.
"""

from typing import Any

import structlog

from finessee.domain.exceptions import NotFoundError, ValidationError
from finessee.infrastructure.models import Feedback
from finessee.infrastructure.storage import Repositories

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5

MODERATION_FIELDS = ("is_approved", "is_published", "admin_notes")


class FeedbackService:
    """Application service for customer feedback."""

    def __init__(self, repos: Repositories, request_id: str | None = None) -> None:
        self.repos = repos
        self.request_id = request_id

    async def submit(
        self,
        user_id: int,
        customer_name: str,
        rating: int,
        title: str,
        message: str,
        product_id: int | None = None,
        customer_phone: str | None = None,
    ) -> Feedback:
        """Submit new feedback. It starts unapproved and unpublished.

        Raises:
            ValidationError: If the rating is outside 1-5.
            NotFoundError: If the user or the referenced product does not exist.
        """
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}",
                details={"rating": rating},
            )
        if await self.repos.users.get(user_id) is None:
            raise NotFoundError.for_entity("User", user_id)
        if product_id is not None and await self.repos.products.get(product_id) is None:
            raise NotFoundError.for_entity("Product", product_id)

        feedback = await self.repos.feedback.create(
            Feedback(
                user_id=user_id,
                product_id=product_id,
                customer_name=customer_name,
                customer_phone=customer_phone,
                rating=rating,
                title=title,
                message=message,
                is_approved=False,
                is_published=False,
            )
        )
        logger.info(
            "Feedback submitted",
            feedback_id=feedback.id,
            rating=rating,
            request_id=self.request_id,
        )
        return feedback

    async def list_all(self) -> list[Feedback]:
        return await self.repos.feedback.list_all()

    async def list_published(self) -> list[Feedback]:
        return await self.repos.feedback.list_published()

    async def moderate(self, feedback_id: int, changes: dict[str, Any]) -> Feedback:
        """Apply moderation changes.

        Un-approving also unpublishes.

        Args:
            feedback_id: Feedback to change.
            changes: Any of is_approved, is_published, admin_notes. ``None``
                values are ignored.

        Raises:
            NotFoundError: If the feedback does not exist.
            ValidationError: If publishing feedback that is not approved.
        """
        feedback = await self.repos.feedback.get(feedback_id)
        if feedback is None:
            raise NotFoundError.for_entity("Feedback", feedback_id)

        updates = {k: changes[k] for k in MODERATION_FIELDS if changes.get(k) is not None}
        approved = updates.get("is_approved", feedback.is_approved)
        if updates.get("is_published") and not approved:
            raise ValidationError(
                "Feedback must be approved before publishing",
                details={"feedback_id": feedback_id},
            )
        if not approved:
            updates["is_published"] = False

        feedback = await self.repos.feedback.update(feedback_id, updates)
        logger.info(
            "Feedback moderated",
            feedback_id=feedback_id,
            is_approved=feedback.is_approved,
            is_published=feedback.is_published,
            request_id=self.request_id,
        )
        return feedback

    async def delete(self, feedback_id: int) -> None:
        """Delete feedback.

        Raises:
            NotFoundError: If the feedback does not exist.
        """
        if not await self.repos.feedback.delete(feedback_id):
            raise NotFoundError.for_entity("Feedback", feedback_id)
        logger.info("Feedback deleted", feedback_id=feedback_id, request_id=self.request_id)
