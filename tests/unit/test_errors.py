"""Unit tests for the error taxonomy."""

import pytest

from feedrank.errors import (
    ArticleNotFoundError,
    FeedRankError,
    FeedRankErrorClass,
    InvalidVoteError,
)


class TestErrors:
    """Tests for FeedRankError subclasses."""

    @pytest.mark.unit
    def test_invalid_vote(self) -> None:
        """Invalid votes are INVALID_INPUT with details."""
        error = InvalidVoteError("u1", "a1", 5)
        assert isinstance(error, FeedRankError)
        assert error.to_dict() == {
            "error_class": "INVALID_INPUT",
            "message": "Invalid vote value 5 for article 'a1'",
            "details": {"user_id": "u1", "article_id": "a1", "value": 5},
        }

    @pytest.mark.unit
    def test_article_not_found(self) -> None:
        """Unknown articles are NOT_FOUND."""
        error = ArticleNotFoundError("a1")
        assert error.error_class == FeedRankErrorClass.NOT_FOUND
        assert error.article_id == "a1"
