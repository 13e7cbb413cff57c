"""
Module: problems

Purpose:
    Problem records as handed over by the problem data source, plus the
    optional metadata used for badge rows on the worksheet.

Key Classes:
    - ProblemMetadata: Presentation metadata (chapters, difficulty, rate...)
    - ProblemRecord: One problem with its problem/answer image references

Dependencies:
    - dataclasses (std)
    - .images.ImageRef

Used By:
    - builder.controller: Generation entry point
    - builder.layout.badges: Badge row construction
    - cli: JSON problem list loading

Design Notes:
    Metadata comes from loosely typed JSON. `from_dict` never raises:
    fields that are missing or of the wrong type are treated as absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .images import ImageRef


def _str_tuple(value: Any) -> Tuple[str, ...]:
    """Keep only the string entries of a list-like value."""
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(v for v in value if isinstance(v, str) and v)


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _opt_number(value: Any) -> Optional[float]:
    # bool is an int subclass; a True correct-rate is malformed
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


@dataclass(frozen=True)
class ProblemMetadata:
    """
    Optional presentation metadata for a problem (immutable).

    Attributes:
        chapter_path: Chapter hierarchy labels, root first
        tag_labels: Hierarchy labels for tag-organized subjects
        tags: Topic-level descriptors
        problem_type: e.g. "multiple choice"
        difficulty: e.g. "hard"
        correct_rate: Percentage of students answering correctly
        exam_year: Year the problem appeared in an exam
        related_subjects: Other subjects the problem touches

    Example:
        >>> meta = ProblemMetadata.from_dict({"difficulty": "hard", "exam_year": 2024})
        >>> meta.badge_labels()
        ['hard', '2024']
    """

    chapter_path: Tuple[str, ...] = ()
    tag_labels: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    problem_type: Optional[str] = None
    difficulty: Optional[str] = None
    correct_rate: Optional[float] = None
    exam_year: Optional[int] = None
    related_subjects: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ProblemMetadata":
        """
        Build metadata from a loosely typed mapping.

        `accuracy_rate` is accepted as an alias of `correct_rate`.
        """
        if not isinstance(data, Mapping):
            return cls()

        correct_rate = _opt_number(data.get("correct_rate"))
        if correct_rate is None:
            correct_rate = _opt_number(data.get("accuracy_rate"))

        exam_year = data.get("exam_year")
        if isinstance(exam_year, bool) or not isinstance(exam_year, int):
            exam_year = None

        return cls(
            chapter_path=_str_tuple(data.get("chapter_path")),
            tag_labels=_str_tuple(data.get("tag_labels")),
            tags=_str_tuple(data.get("tags")),
            problem_type=_opt_str(data.get("problem_type")),
            difficulty=_opt_str(data.get("difficulty")),
            correct_rate=correct_rate,
            exam_year=exam_year,
            related_subjects=_str_tuple(data.get("related_subjects")),
        )

    @property
    def uses_tag_hierarchy(self) -> bool:
        """True when the subject is organized by tags instead of a chapter path."""
        return not self.chapter_path

    def badge_labels(self) -> list[str]:
        """
        Ordered badge texts for this problem.

        Order: hierarchy labels, problem type, difficulty, related
        subjects, correct rate, exam year, then tags. Tag-organized
        subjects already show their tags as the hierarchy, so tags and
        related subjects are only appended for chapter-organized ones.
        """
        labels: list[str] = []

        if self.uses_tag_hierarchy:
            labels.extend(self.tag_labels or self.tags)
        else:
            labels.extend(self.chapter_path)

        if self.problem_type:
            labels.append(self.problem_type)
        if self.difficulty:
            labels.append(self.difficulty)
        if not self.uses_tag_hierarchy:
            labels.extend(self.related_subjects)
        if self.correct_rate is not None:
            labels.append(f"{self.correct_rate:g}% correct")
        if self.exam_year is not None:
            labels.append(str(self.exam_year))
        if not self.uses_tag_hierarchy:
            labels.extend(self.tags)

        return labels

    @property
    def has_badges(self) -> bool:
        return bool(self.badge_labels())


@dataclass(frozen=True)
class ProblemRecord:
    """
    A single problem handed to the builder (immutable).

    Attributes:
        id: Problem identifier (also the override lookup key)
        image_ref: Reference to the problem image
        answer_ref: Reference to the answer image, if the problem has one
        answer_id: Resource id of the answer image when it differs from `id`
        metadata: Optional badge metadata
    """

    id: str
    image_ref: ImageRef
    answer_ref: Optional[ImageRef] = None
    answer_id: Optional[str] = None
    metadata: Optional[ProblemMetadata] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate record on construction."""
        if not self.id:
            raise ValueError("ProblemRecord.id must be non-empty")

    @property
    def has_answer(self) -> bool:
        return self.answer_ref is not None

    @property
    def answer_resource_id(self) -> str:
        """Key used to look up an edited answer image."""
        return self.answer_id or self.id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base_dir: Optional[Path] = None) -> "ProblemRecord":
        """
        Build a record from a JSON object.

        Expected keys: `id`, `image`, optional `answer_image`, `answer_id`
        and `metadata`. Relative local paths are resolved against
        `base_dir` when given.

        Raises:
            ValueError: If `id` or `image` is missing
        """
        problem_id = data.get("id")
        image = data.get("image")
        if not problem_id or not image:
            raise ValueError(f"Problem entry needs 'id' and 'image': {dict(data)!r}")

        answer = data.get("answer_image") or None
        return cls(
            id=str(problem_id),
            image_ref=_resolve_local(image, base_dir),
            answer_ref=_resolve_local(answer, base_dir) if answer else None,
            answer_id=_opt_str(data.get("answer_id")),
            metadata=ProblemMetadata.from_dict(data.get("metadata")),
        )


def _resolve_local(ref: str, base_dir: Optional[Path]) -> ImageRef:
    """Resolve relative filesystem paths; URLs pass through untouched."""
    if base_dir is None or "://" in ref or ref.startswith("data:"):
        return ref
    path = Path(ref)
    return path if path.is_absolute() else base_dir / path
