"""Phase selection for a ranking request.

The phase is derived fresh on every request from whether the caller is
authenticated and how many non-zero votes the user has cast. Nothing is
persisted, so a user whose vote count reaches the threshold stays in
ADOPTION for as long as the count holds.
"""

from dataclasses import dataclass
from enum import Enum

from feedrank.config.constants import ONBOARDING_VOTE_THRESHOLD


class FeedPhase(str, Enum):
    """Ranking policy tier of a request.

    - LOGGED_OUT: Anonymous visitor; recency and diversity only
    - ONBOARDING: Signed-in user with fewer votes than the threshold
    - ADOPTION: Signed-in user with enough votes for full personalization
    """

    LOGGED_OUT = "LOGGED_OUT"
    ONBOARDING = "ONBOARDING"
    ADOPTION = "ADOPTION"


class DiversityKey(str, Enum):
    """Article attribute balanced by the reranker after the rotation block."""

    CATEGORY = "category"
    SOURCE = "source"


@dataclass(frozen=True)
class PhasePolicy:
    """Scoring and diversity policy attached to a phase.

    Attributes:
        phase: Phase this policy belongs to.
        diversity_key: Attribute balanced during continuation.
        applies_source_penalty: Whether continuation uses the diminishing
            source penalty instead of occupancy balancing.
        uses_content: Whether the content similarity term is added.
    """

    phase: FeedPhase
    diversity_key: DiversityKey
    applies_source_penalty: bool
    uses_content: bool


def select_phase(
    is_authenticated: bool,
    vote_count: int,
    threshold: int = ONBOARDING_VOTE_THRESHOLD,
) -> FeedPhase:
    """Derive the phase for a request.

    Args:
        is_authenticated: Whether the request carries a user id.
        vote_count: Number of the user's votes with a non-zero value.
        threshold: Votes required to leave onboarding.

    Returns:
        The phase governing scoring and diversity.
    """
    if not is_authenticated:
        return FeedPhase.LOGGED_OUT
    if vote_count < threshold:
        return FeedPhase.ONBOARDING
    return FeedPhase.ADOPTION


_POLICIES: dict[FeedPhase, PhasePolicy] = {
    FeedPhase.LOGGED_OUT: PhasePolicy(
        phase=FeedPhase.LOGGED_OUT,
        diversity_key=DiversityKey.CATEGORY,
        applies_source_penalty=False,
        uses_content=False,
    ),
    FeedPhase.ONBOARDING: PhasePolicy(
        phase=FeedPhase.ONBOARDING,
        diversity_key=DiversityKey.CATEGORY,
        applies_source_penalty=False,
        uses_content=True,
    ),
    FeedPhase.ADOPTION: PhasePolicy(
        phase=FeedPhase.ADOPTION,
        diversity_key=DiversityKey.SOURCE,
        applies_source_penalty=True,
        uses_content=True,
    ),
}


def policy_for(phase: FeedPhase) -> PhasePolicy:
    """Get the diversity and content policy for a phase."""
    return _POLICIES[phase]
