"""Tests for the feedback service."""

import pytest

from finessee.application.feedback_service import FeedbackService
from finessee.domain.exceptions import NotFoundError, ValidationError


async def _submit(service, user, **overrides):
    fields = {
        "user_id": user.id,
        "customer_name": user.name,
        "rating": 5,
        "title": "Lovely",
        "message": "Beautiful craftsmanship",
    }
    fields.update(overrides)
    return await service.submit(**fields)


class TestSubmit:
    """Tests for feedback submission."""

    @pytest.mark.asyncio
    async def test_starts_hidden(self, repos, customer):
        """Test new feedback is neither approved nor published."""
        feedback = await _submit(FeedbackService(repos), customer)

        assert feedback.id is not None
        assert feedback.is_approved is False
        assert feedback.is_published is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6, -1])
    async def test_rating_bounds(self, repos, customer, rating):
        """Test ratings outside 1-5 are rejected."""
        with pytest.raises(ValidationError):
            await _submit(FeedbackService(repos), customer, rating=rating)

    @pytest.mark.asyncio
    async def test_unknown_product(self, repos, customer):
        """Test feedback about an unknown product is rejected."""
        with pytest.raises(NotFoundError):
            await _submit(FeedbackService(repos), customer, product_id=777)

    @pytest.mark.asyncio
    async def test_about_product(self, repos, customer, make_product):
        """Test feedback can reference a product."""
        product = await repos.products.create(make_product("FB-1"))
        feedback = await _submit(FeedbackService(repos), customer, product_id=product.id)

        assert feedback.product_id == product.id


class TestModerate:
    """Tests for moderation."""

    @pytest.mark.asyncio
    async def test_publish_requires_approval(self, repos, customer):
        """Test unapproved feedback cannot be published."""
        service = FeedbackService(repos)
        feedback = await _submit(service, customer)

        with pytest.raises(ValidationError):
            await service.moderate(feedback.id, {"is_published": True})

    @pytest.mark.asyncio
    async def test_approve_and_publish(self, repos, customer):
        """Test approved and published feedback appears publicly."""
        service = FeedbackService(repos)
        feedback = await _submit(service, customer)

        await service.moderate(feedback.id, {"is_approved": True, "is_published": True})

        published = await service.list_published()
        assert [f.id for f in published] == [feedback.id]

    @pytest.mark.asyncio
    async def test_unapprove_unpublishes(self, repos, customer):
        """Test withdrawing approval also hides the feedback."""
        service = FeedbackService(repos)
        feedback = await _submit(service, customer)
        await service.moderate(feedback.id, {"is_approved": True, "is_published": True})

        updated = await service.moderate(feedback.id, {"is_approved": False})
        assert updated.is_published is False
        assert await service.list_published() == []

    @pytest.mark.asyncio
    async def test_admin_notes(self, repos, customer):
        """Test notes are stored without changing visibility."""
        service = FeedbackService(repos)
        feedback = await _submit(service, customer)

        updated = await service.moderate(feedback.id, {"admin_notes": "Called back", "is_published": None})
        assert updated.admin_notes == "Called back"
        assert updated.is_published is False

    @pytest.mark.asyncio
    async def test_missing(self, repos):
        """Test moderating unknown feedback raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await FeedbackService(repos).moderate(5, {"is_approved": True})


class TestListingAndDelete:
    """Tests for listing and deletion."""

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, repos, customer):
        """Test all feedback is listed newest first."""
        service = FeedbackService(repos)
        older = await _submit(service, customer, title="First")
        newer = await _submit(service, customer, title="Second")

        assert [f.id for f in await service.list_all()] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_delete(self, repos, customer):
        """Test deleted feedback is gone and a second delete fails."""
        service = FeedbackService(repos)
        feedback = await _submit(service, customer)

        await service.delete(feedback.id)
        assert await service.list_all() == []
        with pytest.raises(NotFoundError):
            await service.delete(feedback.id)
