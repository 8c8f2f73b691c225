import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import and_, case, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scored.database import upsert_for
from scored.exceptions import (
    AlreadyFriendsError,
    DuplicateRequestError,
    RequestNotFoundError,
    SelfRequestError,
)
from scored.models.friend_request import ACCEPTED, DECLINED, PENDING, FriendRequest
from scored.models.friendship import Friendship
from scored.models.user import User

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


async def search_users(
    db: AsyncSession, query: str | None, exclude_user_id: uuid.UUID
) -> list[dict]:
    """Case-insensitive match on username or name. Short queries match nothing."""
    if not query or len(query) < SEARCH_MIN_LENGTH:
        return []

    result = await db.execute(
        select(User)
        .where(
            or_(
                User.username.icontains(query, autoescape=True),
                User.name.icontains(query, autoescape=True),
            ),
            User.id != exclude_user_id,
        )
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
    )
    return [
        {"id": u.id, "name": u.name, "username": u.username}
        for u in result.scalars().all()
    ]


async def send_request(
    db: AsyncSession, sender_id: uuid.UUID, receiver_id: uuid.UUID
) -> FriendRequest:
    """Create a pending request. One request may ever exist per pair of users."""
    if sender_id == receiver_id:
        raise SelfRequestError()

    low, high = FriendRequest.canonical_pair(sender_id, receiver_id)

    existing = await db.execute(
        select(FriendRequest.status).where(
            FriendRequest.user_low_id == low,
            FriendRequest.user_high_id == high,
        )
    )
    existing_status = existing.scalar_one_or_none()
    if existing_status == ACCEPTED:
        raise AlreadyFriendsError()
    if existing_status is not None:
        raise DuplicateRequestError()

    receiver = await db.get(User, receiver_id)
    if receiver is None:
        raise ValueError("User not found")

    # The pair constraint settles concurrent sends: the loser inserts nothing
    table = FriendRequest.__table__
    now = datetime.now(timezone.utc)
    stmt = (
        upsert_for(db, table)
        .values(
            id=uuid.uuid4(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            user_low_id=low,
            user_high_id=high,
            status=PENDING,
            created_at=now,
            updated_at=now,
        )
        .on_conflict_do_nothing(index_elements=[table.c.user_low_id, table.c.user_high_id])
        .returning(table.c.id)
    )
    result = await db.execute(stmt)
    request_id = result.scalar_one_or_none()
    if request_id is None:
        raise DuplicateRequestError()

    logger.info("Friend request %s sent from %s to %s", request_id, sender_id, receiver_id)
    return await db.get(FriendRequest, request_id)


async def respond_to_request(
    db: AsyncSession,
    responder_id: uuid.UUID,
    sender_id: uuid.UUID,
    decision: str,
) -> str:
    """Accept or decline a pending request addressed to the responder.

    The status change and the friendship row are flushed in the same
    transaction, so either both are committed or neither is.
    """
    if decision not in (ACCEPTED, DECLINED):
        raise ValueError("Invalid action")

    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(FriendRequest)
        .where(
            FriendRequest.sender_id == sender_id,
            FriendRequest.receiver_id == responder_id,
            FriendRequest.status == PENDING,
        )
        .values(status=decision, updated_at=now)
        .returning(FriendRequest.id)
        .execution_options(synchronize_session=False)
    )
    request_id = result.scalar_one_or_none()
    if request_id is None:
        raise RequestNotFoundError()

    if decision == DECLINED:
        logger.info("Friend request %s declined by %s", request_id, responder_id)
        return "Friend request declined"

    uid1, uid2 = (min(responder_id, sender_id), max(responder_id, sender_id))
    db.add(Friendship(
        user_id_1=uid1,
        user_id_2=uid2,
        request_id=request_id,
        created_at=now,
    ))
    await db.flush()

    logger.info("Friend request %s accepted by %s", request_id, responder_id)
    return "Friend request accepted"


async def are_friends(db: AsyncSession, user_a: uuid.UUID, user_b: uuid.UUID) -> bool:
    """Check if two users are friends."""
    uid1, uid2 = (min(user_a, user_b), max(user_a, user_b))
    result = await db.execute(
        select(Friendship.id).where(
            Friendship.user_id_1 == uid1,
            Friendship.user_id_2 == uid2,
        )
    )
    return result.scalar_one_or_none() is not None


def friend_ids_query(user_id: uuid.UUID):
    """SELECT of the ids of every friend of the user, one row per friend."""
    return select(
        case(
            (Friendship.user_id_1 == user_id, Friendship.user_id_2),
            else_=Friendship.user_id_1,
        )
    ).where(
        or_(
            Friendship.user_id_1 == user_id,
            Friendship.user_id_2 == user_id,
        )
    )


async def get_pending_requests(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    """Pending requests received by the user, newest first."""
    result = await db.execute(
        select(FriendRequest, User)
        .join(User, User.id == FriendRequest.sender_id)
        .where(
            FriendRequest.receiver_id == user_id,
            FriendRequest.status == PENDING,
        )
        .order_by(FriendRequest.created_at.desc())
    )
    return [
        {
            "id": request.id,
            "sender_id": request.sender_id,
            "created_at": request.created_at,
            "name": sender.name,
            "username": sender.username,
        }
        for request, sender in result.all()
    ]


async def get_friends(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    """All friends of the user, most recent friendship first."""
    result = await db.execute(
        select(User, Friendship.created_at)
        .join(
            Friendship,
            or_(
                and_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == User.id),
                and_(Friendship.user_id_2 == user_id, Friendship.user_id_1 == User.id),
            ),
        )
        .order_by(Friendship.created_at.desc())
    )
    return [
        {
            "id": friend.id,
            "name": friend.name,
            "username": friend.username,
            "created_at": since,
        }
        for friend, since in result.all()
    ]
