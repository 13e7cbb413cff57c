"""
Worksheet Builder Core Package

Shared domain records handed to the builder by the problem data source.
The builder never filters, sorts or fetches problems; it receives a
finished, ordered list of ProblemRecord objects.
"""

from .models import ImageRef, ProblemMetadata, ProblemRecord

__all__ = [
    "ImageRef",
    "ProblemMetadata",
    "ProblemRecord",
]
