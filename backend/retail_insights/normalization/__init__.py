"""Normalization module for catalog pack sizes."""

from .normalizer import (
    DEFAULT_RULES,
    NormalizedSize,
    PackSizeNormalizer,
    PackSizeUnit,
    UnitRule,
    extract_numbers,
)

__all__ = [
    'DEFAULT_RULES',
    'NormalizedSize',
    'PackSizeNormalizer',
    'PackSizeUnit',
    'UnitRule',
    'extract_numbers',
]
