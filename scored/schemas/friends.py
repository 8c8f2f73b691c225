import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from scored.schemas.score import ScoreResponse, ScoreStats


class UserSummary(BaseModel):
    id: uuid.UUID
    name: str
    username: str | None


class UserSearchResponse(BaseModel):
    users: list[UserSummary]


class PendingRequest(BaseModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    created_at: datetime
    name: str
    username: str | None


class PendingRequestsResponse(BaseModel):
    requests: list[PendingRequest]


class FriendResponse(BaseModel):
    id: uuid.UUID
    name: str
    username: str | None
    created_at: datetime


class FriendsResponse(BaseModel):
    friends: list[FriendResponse]


class FeedItem(ScoreResponse):
    user_id: uuid.UUID
    user_name: str
    user_username: str | None


class FeedResponse(BaseModel):
    scores: list[FeedItem]


class FriendScoresResponse(BaseModel):
    friend: UserSummary
    scores: list[ScoreResponse]
    stats: ScoreStats


class FriendActionRequest(BaseModel):
    action: Literal["send", "accept", "decline"]
    target_user_id: uuid.UUID = Field(alias="targetUserId")


class FriendActionResponse(BaseModel):
    success: bool = True
    message: str
