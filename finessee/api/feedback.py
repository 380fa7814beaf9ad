"""Feedback API endpoints.

Provides endpoints for customer reviews:
- POST /api/feedback - submit feedback
- GET /api/feedback/published - published feedback
- GET /api/feedback - all feedback (admin)
- PUT /api/feedback/{id} - moderate feedback (admin)
- DELETE /api/feedback/{id} - delete feedback (admin)
"""

from fastapi import APIRouter, status

from finessee.api.deps import AdminUser, FeedbackServiceDep, OptionalUser
from finessee.api.schemas import (
    ErrorResponse,
    FeedbackCreateRequest,
    FeedbackResponse,
    FeedbackUpdateRequest,
    SuccessResponse,
)
from finessee.domain.exceptions import ValidationError

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post(
    "",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def submit_feedback(
    body: FeedbackCreateRequest,
    user: OptionalUser,
    service: FeedbackServiceDep,
) -> FeedbackResponse:
    """Submit feedback. It stays hidden until approved and published."""
    user_id = user.id if user is not None else body.user_id
    if user_id is None:
        raise ValidationError("userId is required", details={"user_id": "missing"})

    feedback = await service.submit(
        user_id=user_id,
        customer_name=body.customer_name,
        rating=body.rating,
        title=body.title,
        message=body.message,
        product_id=body.product_id,
        customer_phone=body.customer_phone,
    )
    return FeedbackResponse.model_validate(feedback)


@router.get("/published", response_model=list[FeedbackResponse])
async def published_feedback(service: FeedbackServiceDep) -> list[FeedbackResponse]:
    """Get published feedback, newest first."""
    return [FeedbackResponse.model_validate(f) for f in await service.list_published()]


@router.get("", response_model=list[FeedbackResponse])
async def list_feedback(admin: AdminUser, service: FeedbackServiceDep) -> list[FeedbackResponse]:
    """Get all feedback, newest first."""
    return [FeedbackResponse.model_validate(f) for f in await service.list_all()]


@router.put(
    "/{feedback_id}",
    response_model=FeedbackResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def moderate_feedback(
    feedback_id: int,
    body: FeedbackUpdateRequest,
    admin: AdminUser,
    service: FeedbackServiceDep,
) -> FeedbackResponse:
    """Approve, publish or annotate feedback."""
    feedback = await service.moderate(feedback_id, body.model_dump(exclude_unset=True))
    return FeedbackResponse.model_validate(feedback)


@router.delete(
    "/{feedback_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_feedback(
    feedback_id: int,
    admin: AdminUser,
    service: FeedbackServiceDep,
) -> SuccessResponse:
    """Delete feedback."""
    await service.delete(feedback_id)
    return SuccessResponse(success=True)
