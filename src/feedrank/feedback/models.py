"""Data models for user feedback."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import AwareDatetime, Field

from feedrank.config.constants import MAX_INTEREST_WEIGHT, MIN_INTEREST_WEIGHT
from feedrank.data_model import StrictBaseModel


VoteValue = Literal[-1, 0, 1]


class Vote(StrictBaseModel):
    """A user's explicit signal on one article.

    Attributes:
        user_id: Voting user.
        article_id: Target article.
        value: -1 downvote, +1 upvote, 0 retracted.
        voted_at: Time of the latest change.
    """

    user_id: str
    article_id: str
    value: VoteValue
    voted_at: AwareDatetime


class Save(StrictBaseModel):
    """A bookmark; counts as an implicit like."""

    user_id: str
    article_id: str
    saved_at: AwareDatetime


class Impression(StrictBaseModel):
    """Per-(user, article) view counter.

    Attributes:
        user_id: Viewing user.
        article_id: Viewed article.
        impression_count: Number of times shown.
        first_seen_at: First view.
        last_seen_at: Latest view.
    """

    user_id: str
    article_id: str
    impression_count: Annotated[int, Field(ge=0)]
    first_seen_at: AwareDatetime
    last_seen_at: AwareDatetime


class WeightDimension(str, Enum):
    """Dimension an interest weight row applies to."""

    CATEGORY = "category"
    SOURCE = "source"


class InterestWeight(StrictBaseModel):
    """A stored per-user multiplier for one category or one source.

    Attributes:
        user_id: Owning user.
        dimension: Whether key_id names a category or a source.
        key_id: Category or source identifier.
        weight: Multiplier in [0.1, 2.0].
    """

    user_id: str
    dimension: WeightDimension
    key_id: str
    weight: Annotated[float, Field(ge=MIN_INTEREST_WEIGHT, le=MAX_INTEREST_WEIGHT)]


class SeedInteractionType(str, Enum):
    """Kinds of first interaction that seed onboarding."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    SAVE = "save"
    CLICK = "click"


class SeedInteraction(StrictBaseModel):
    """The first interaction a user made before full signup.

    Attributes:
        user_id: Interacting user.
        article_id: Article interacted with.
        interaction_type: Kind of interaction.
        category_id: Category of the article.
        source_id: Source of the article.
        created_at: Time of the interaction.
    """

    user_id: str
    article_id: str
    interaction_type: SeedInteractionType
    category_id: str
    source_id: str
    created_at: AwareDatetime


class SourcePreference(StrictBaseModel):
    """A user's choice to show or mute one source.

    Sources without a preference row are shown.

    Attributes:
        user_id: Owning user.
        source_id: Source the preference applies to.
        active: False when the user muted the source.
        updated_at: Time of the latest change.
    """

    user_id: str
    source_id: str
    active: bool = True
    updated_at: AwareDatetime
