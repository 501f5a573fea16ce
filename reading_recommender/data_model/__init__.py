"""Shared data model primitives."""

from reading_recommender.data_model.base import StrictBaseModel


__all__ = ["StrictBaseModel"]
