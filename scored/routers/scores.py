import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scored.database import get_db
from scored.dependencies import get_current_user, get_today
from scored.exceptions import ScoreNotFoundError
from scored.models.user import User
from scored.schemas.score import (
    ScoreCreate,
    ScoreListResponse,
    ScoreSaveResponse,
    SuccessResponse,
)
from scored.services import score_service

router = APIRouter(prefix="/scores", tags=["scores"])


def _require_self(user: User, user_id: uuid.UUID | None) -> None:
    # The session decides whose scores these are; userId must agree with it
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID required")
    if user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot access another user's scores",
        )


@router.get("", response_model=ScoreListResponse)
async def list_scores(
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
    limit: int = Query(default=30, ge=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    _require_self(user, user_id)
    scores = await score_service.get_scores(db, user.id, limit)
    return {
        "scores": [score_service.serialize_score(s) for s in scores],
        "stats": score_service.summarize(scores, today),
    }


@router.post("", response_model=ScoreSaveResponse)
async def save_today_score(
    data: ScoreCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    """Record today's score, replacing any score already saved today."""
    _require_self(user, data.user_id)
    score = await score_service.upsert_score(
        db, user.id, data.score, data.description, today
    )
    return {"success": True, "score": score_service.serialize_score(score)}


@router.delete("", response_model=SuccessResponse)
async def delete_score(
    score_id: uuid.UUID | None = Query(default=None, alias="id"),
    user_id: uuid.UUID | None = Query(default=None, alias="userId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if score_id is None or user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Score ID and User ID required",
        )
    if user_id != user.id:
        raise ScoreNotFoundError()

    await score_service.delete_score(db, user.id, score_id)
    return {"success": True}
