import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scored.database import get_db
from scored.dependencies import get_current_user, get_today
from scored.models.friend_request import ACCEPTED, DECLINED
from scored.models.user import User
from scored.schemas.friends import (
    FeedResponse,
    FriendActionRequest,
    FriendActionResponse,
    FriendScoresResponse,
    FriendsResponse,
    PendingRequestsResponse,
    UserSearchResponse,
)
from scored.services import friend_service, score_service

router = APIRouter(tags=["friends"])

FEED_DEFAULT_LIMIT = 50
FRIEND_SCORES_DEFAULT_LIMIT = 30


@router.get("/friends")
async def friends_query(
    action: str | None = None,
    q: str | None = None,
    friend_id: uuid.UUID | None = Query(default=None, alias="friendId"),
    limit: int | None = Query(default=None, ge=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today),
):
    """Read side of the social graph, selected by ``action``."""
    if action == "search":
        users = await friend_service.search_users(db, q, user.id)
        return UserSearchResponse(users=users)

    if action == "pending":
        requests = await friend_service.get_pending_requests(db, user.id)
        return PendingRequestsResponse(requests=requests)

    if action == "friends":
        friends = await friend_service.get_friends(db, user.id)
        return FriendsResponse(friends=friends)

    if action == "feed":
        scores = await score_service.get_feed(db, user.id, limit or FEED_DEFAULT_LIMIT)
        return FeedResponse(scores=scores)

    if action == "friend-scores":
        if friend_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Friend ID required"
            )
        result = await score_service.get_friend_scores(
            db, user.id, friend_id, today, limit or FRIEND_SCORES_DEFAULT_LIMIT
        )
        return FriendScoresResponse(**result)

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")


@router.post("/friends", response_model=FriendActionResponse)
async def friends_action(
    data: FriendActionRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Send, accept or decline a friend request."""
    if data.action == "send":
        await friend_service.send_request(db, user.id, data.target_user_id)
        return FriendActionResponse(message="Friend request sent")

    decision = ACCEPTED if data.action == "accept" else DECLINED
    message = await friend_service.respond_to_request(
        db, user.id, data.target_user_id, decision
    )
    return FriendActionResponse(message=message)
