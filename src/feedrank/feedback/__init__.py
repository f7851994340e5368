"""User feedback models, settings and collaborator protocols."""

from feedrank.feedback.memory import (
    InMemoryArticleCatalog,
    InMemoryFeedbackStore,
    InMemorySettingsProvider,
)
from feedrank.feedback.metrics import FeedbackMetrics
from feedrank.feedback.models import (
    Impression,
    InterestWeight,
    Save,
    SeedInteraction,
    SeedInteractionType,
    SourcePreference,
    Vote,
    VoteValue,
    WeightDimension,
)
from feedrank.feedback.protocols import ArticleCatalog, FeedbackStore, SettingsProvider
from feedrank.feedback.settings import (
    DEFAULT_SETTINGS,
    AlgorithmProfile,
    UserAlgorithmSettings,
    sanitize_settings,
)


__all__ = [
    "DEFAULT_SETTINGS",
    "AlgorithmProfile",
    "ArticleCatalog",
    "FeedbackMetrics",
    "FeedbackStore",
    "Impression",
    "InMemoryArticleCatalog",
    "InMemoryFeedbackStore",
    "InMemorySettingsProvider",
    "InterestWeight",
    "Save",
    "SeedInteraction",
    "SeedInteractionType",
    "SettingsProvider",
    "SourcePreference",
    "UserAlgorithmSettings",
    "Vote",
    "VoteValue",
    "WeightDimension",
    "sanitize_settings",
]
