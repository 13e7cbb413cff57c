"""
Core Models Package

Immutable records describing the problems that make up a worksheet.
All models are frozen dataclasses so they can be shared safely between
concurrent generation passes.
"""

from .images import ImageRef, describe_ref
from .problems import ProblemMetadata, ProblemRecord

__all__ = [
    "ImageRef",
    "describe_ref",
    "ProblemMetadata",
    "ProblemRecord",
]
