import logging
import math
import uuid
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from scored.config import settings
from scored.database import upsert_for
from scored.exceptions import InvalidScoreError, NotFriendsError, ScoreNotFoundError
from scored.models.score import MAX_SCORE, MIN_SCORE, Score
from scored.models.user import User
from scored.services import friend_service, mood

logger = logging.getLogger(__name__)

# Larger page sizes are served at this size rather than refused
MAX_LIMIT = 365


def today(tz_name: str | None = None) -> date:
    """Calendar day in the ledger's reference time zone."""
    tz = ZoneInfo(tz_name or settings.SCORE_TIMEZONE)
    return datetime.now(tz).date()


def serialize_score(score: Score) -> dict:
    return {
        "id": score.id,
        "score": score.score,
        "description": score.description,
        "date": score.score_date,
        "created_at": score.created_at,
        "updated_at": score.updated_at,
        "mood": mood.describe(score.score),
    }


def summarize(scores: list[Score], day: date) -> dict:
    """Average and streaks over a window of scores."""
    if not scores:
        return {"count": 0, "average": 0, "current_streak": 0, "longest_streak": 0}

    values = [s.score for s in scores]
    # Round half up
    average = math.floor(sum(values) / len(values) + 0.5)

    days = sorted({s.score_date for s in scores}, reverse=True)
    longest = run = 1
    for newer, older in zip(days, days[1:]):
        run = run + 1 if (newer - older).days == 1 else 1
        longest = max(longest, run)

    logged = set(days)
    cursor = day if day in logged else day - timedelta(days=1)
    current = 0
    while cursor in logged:
        current += 1
        cursor -= timedelta(days=1)

    return {
        "count": len(scores),
        "average": average,
        "current_streak": current,
        "longest_streak": longest,
    }


async def upsert_score(
    db: AsyncSession,
    user_id: uuid.UUID,
    value: int,
    description: str | None,
    day: date,
) -> Score:
    """Write the user's score for the given day, overwriting an earlier one."""
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise InvalidScoreError()

    description = (description or "").strip() or None
    now = datetime.now(timezone.utc)

    table = Score.__table__
    stmt = upsert_for(db, table).values(
        id=uuid.uuid4(),
        user_id=user_id,
        score=value,
        description=description,
        date=day,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id, table.c.date],
        set_={
            "score": stmt.excluded.score,
            "description": stmt.excluded.description,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(table.c.id)

    result = await db.execute(stmt)
    score_id = result.scalar_one()

    score = await db.get(Score, score_id, populate_existing=True)
    logger.info("Saved score %s for user %s on %s", value, user_id, day)
    return score


async def get_scores(
    db: AsyncSession, user_id: uuid.UUID, limit: int = 30
) -> list[Score]:
    result = await db.execute(
        select(Score)
        .where(Score.user_id == user_id)
        .order_by(Score.score_date.desc())
        .limit(min(limit, MAX_LIMIT))
    )
    return list(result.scalars().all())


async def delete_score(
    db: AsyncSession, user_id: uuid.UUID, score_id: uuid.UUID
) -> None:
    result = await db.execute(
        delete(Score)
        .where(Score.id == score_id, Score.user_id == user_id)
        .returning(Score.id)
    )
    if result.scalar_one_or_none() is None:
        raise ScoreNotFoundError()
    logger.info("Deleted score %s for user %s", score_id, user_id)


async def get_friend_scores(
    db: AsyncSession,
    viewer_id: uuid.UUID,
    friend_id: uuid.UUID,
    day: date,
    limit: int = 30,
) -> dict:
    """A friend's score history. Non-friends are refused."""
    if not await friend_service.are_friends(db, viewer_id, friend_id):
        logger.warning("User %s denied scores of non-friend %s", viewer_id, friend_id)
        raise NotFriendsError()

    friend = await db.get(User, friend_id)
    scores = await get_scores(db, friend_id, limit)
    return {
        "friend": {"id": friend.id, "name": friend.name, "username": friend.username},
        "scores": [serialize_score(s) for s in scores],
        "stats": summarize(scores, day),
    }


async def get_feed(
    db: AsyncSession, viewer_id: uuid.UUID, limit: int = 50
) -> list[dict]:
    """Recent scores from every friend of the viewer, newest first."""
    result = await db.execute(
        select(Score, User)
        .join(User, User.id == Score.user_id)
        .where(
            Score.user_id.in_(friend_service.friend_ids_query(viewer_id)),
            Score.user_id != viewer_id,
        )
        .order_by(Score.created_at.desc())
        .limit(min(limit, MAX_LIMIT))
    )

    feed = []
    for score, owner in result.all():
        item = serialize_score(score)
        item.update({
            "user_id": owner.id,
            "user_name": owner.name,
            "user_username": owner.username,
        })
        feed.append(item)
    return feed
