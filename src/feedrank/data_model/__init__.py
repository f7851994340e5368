"""Shared data model primitives."""

from feedrank.data_model.article import Article
from feedrank.data_model.base import StrictBaseModel


__all__ = ["Article", "StrictBaseModel"]
