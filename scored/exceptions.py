from fastapi import status


class ScoredError(ValueError):
    """Base class for domain failures. Each subclass maps to one HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


# --- Friend requests ---


class SelfRequestError(ScoredError):
    detail = "Cannot send friend request to yourself"


class AlreadyFriendsError(ScoredError):
    detail = "You are already friends"


class DuplicateRequestError(ScoredError):
    detail = "Friend request already exists"


class RequestNotFoundError(ScoredError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Friend request not found"


class NotFriendsError(ScoredError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Not friends with this user"


# --- Scores ---


class InvalidScoreError(ScoredError):
    detail = "Valid score (0-100) required"


class ScoreNotFoundError(ScoredError):
    # Same response whether the score is missing or belongs to someone else
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Score not found or unauthorized"


# --- Users ---


class UserNotFoundError(ScoredError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"


class InvalidUsernameError(ScoredError):
    detail = (
        "Username must be 3-20 characters and contain only letters, numbers, "
        "underscores, and dashes"
    )


class UsernameTakenError(ScoredError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Username is already taken"


class EmailTakenError(ScoredError):
    status_code = status.HTTP_409_CONFLICT
    detail = "An account with this email already exists"


class InvalidCredentialsError(ScoredError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid email or password"
