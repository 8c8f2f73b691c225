from scored.models.base import Base
from scored.models.friend_request import FriendRequest
from scored.models.friendship import Friendship
from scored.models.score import Score
from scored.models.user import User

__all__ = [
    "Base",
    "FriendRequest",
    "Friendship",
    "Score",
    "User",
]
