"""Constants for ranking configuration."""

# Votes (non-zero) required before a user leaves onboarding.
ONBOARDING_VOTE_THRESHOLD: int = 10

# Recency decay windows a user may pick from.
ALLOWED_RECENCY_DECAY_HOURS: tuple[int, ...] = (12, 24, 48, 72)
DEFAULT_RECENCY_DECAY_HOURS: int = 24

# Interest weight bounds.
DEFAULT_INTEREST_WEIGHT: float = 1.0
MIN_INTEREST_WEIGHT: float = 0.1
MAX_INTEREST_WEIGHT: float = 2.0

# Display distribution for adjusted scores.
TARGET_MEAN: float = 50.0
TARGET_STDDEV: float = 20.0

# Embedding lookups are sent to the provider in groups of this size.
EMBEDDING_BATCH_SIZE: int = 20
