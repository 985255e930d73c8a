"""Data models for hyperpalette."""

from .items import (
    Actionable,
    HyperItem,
    HyperItemId,
    Navigable,
    RequestSource,
    Searchable,
    generate_id,
)

__all__ = [
    "Actionable",
    "HyperItem",
    "HyperItemId",
    "Navigable",
    "RequestSource",
    "Searchable",
    "generate_id",
]
