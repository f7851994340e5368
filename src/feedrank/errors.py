"""Error types for the feed ranking core."""

from enum import Enum


class FeedRankErrorClass(str, Enum):
    """Classification of ranking core errors.

    - INVALID_INPUT: A write-path request carried an invalid value
    - NOT_FOUND: A referenced article does not exist
    - CONFIG: Ranking configuration could not be loaded or validated
    """

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONFIG = "CONFIG"


class FeedRankError(Exception):
    """Base exception for ranking core errors.

    Provides structured error information for logging and API mapping.
    """

    def __init__(
        self,
        error_class: FeedRankErrorClass,
        message: str,
        details: dict[str, str | int | float | None] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | dict[str, str | int | float | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidVoteError(FeedRankError):
    """Raised when a vote value is outside {-1, 0, 1}."""

    def __init__(self, user_id: str, article_id: str, value: int) -> None:
        """Initialize the error.

        Args:
            user_id: Voting user.
            article_id: Target article.
            value: Rejected vote value.
        """
        super().__init__(
            FeedRankErrorClass.INVALID_INPUT,
            f"Invalid vote value {value} for article '{article_id}'",
            details={"user_id": user_id, "article_id": article_id, "value": value},
        )
        self.value = value


class ArticleNotFoundError(FeedRankError):
    """Raised when a write-path operation references an unknown article."""

    def __init__(self, article_id: str) -> None:
        """Initialize the error.

        Args:
            article_id: Missing article identifier.
        """
        super().__init__(
            FeedRankErrorClass.NOT_FOUND,
            f"Article '{article_id}' not found",
            details={"article_id": article_id},
        )
        self.article_id = article_id


class ConfigValidationError(FeedRankError):
    """Raised when ranking configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        super().__init__(
            FeedRankErrorClass.CONFIG,
            f"Validation failed for {file_path}: {len(errors)} errors",
            details={"file_path": file_path, "error_count": len(errors)},
        )
        self.errors = errors
        self.file_path = file_path
