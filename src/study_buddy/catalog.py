"""
Lesson catalog: which quizzes each category offers, and where each quiz
lives at the flashcard provider.

The catalog is read-only and injected into the controller. It is built once
at startup, either from the bundled defaults or from a JSON file.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, model_validator
from rapidfuzz import fuzz, process

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "history": ("war of eighteen twelve", "ancient greeks", "world war two"),
    "science": ("anatomy of a cell", "taxonomy"),
    "math": ("multiplication tables", "geometry"),
}

DEFAULT_LESSONS: Dict[str, int] = {
    "war of eighteen twelve": 224419706,
    "ancient greeks": 224423901,
    "world war two": 224423253,
    "anatomy of a cell": 224426220,
    "taxonomy": 224426529,
    "multiplication tables": 224427231,
    "geometry": 224427531,
}


class CatalogFile(BaseModel):
    """Schema of a catalog JSON file."""
    categories: Dict[str, List[str]] = Field(description="Category name to ordered quiz names")
    lessons: Dict[str, int] = Field(description="Quiz name to flashcard set id")

    @model_validator(mode="after")
    def check_quizzes_registered(self) -> "CatalogFile":
        for category, quizzes in self.categories.items():
            unknown = [q for q in quizzes if q not in self.lessons]
            if unknown:
                raise ValueError(f"Category '{category}' lists unregistered quizzes: {unknown}")
        return self


@dataclass(frozen=True)
class LessonCatalog:
    """
    Immutable category and lesson registry.

    Quiz names are resolved exactly first, then case-insensitively, then by
    fuzzy match so that near-miss speech recognition still finds the set.
    """
    categories: Mapping[str, Tuple[str, ...]]
    lessons: Mapping[str, int]
    enable_fuzzy_matching: bool = True
    fuzzy_threshold: float = 0.85
    _lowered: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy_threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0.0 and 1.0, got {self.fuzzy_threshold}")
        object.__setattr__(
            self,
            "categories",
            MappingProxyType({name: tuple(quizzes) for name, quizzes in self.categories.items()}),
        )
        object.__setattr__(self, "lessons", MappingProxyType(dict(self.lessons)))
        object.__setattr__(
            self, "_lowered", MappingProxyType({name.lower(): name for name in self.lessons})
        )

    def category_names(self) -> Tuple[str, ...]:
        return tuple(self.categories)

    def has_category(self, category: Optional[str]) -> bool:
        return category is not None and category in self.categories

    def quizzes_for(self, category: Optional[str]) -> Tuple[str, ...]:
        """Quiz names offered in a category (empty for an unknown category)."""
        if category is None:
            return ()
        return self.categories.get(category, ())

    def resolve_quiz_name(self, quiz_name: Optional[str]) -> Optional[str]:
        """
        Map a spoken quiz name to its registered name.

        :param quiz_name: Name as heard
        :return: Registered quiz name, or None if nothing matches
        """
        if not quiz_name:
            return None

        if quiz_name in self.lessons:
            return quiz_name

        lowered = quiz_name.strip().lower()
        if lowered in self._lowered:
            return self._lowered[lowered]

        if not self.enable_fuzzy_matching:
            return None

        result = process.extractOne(
            lowered,
            list(self._lowered),
            scorer=fuzz.ratio,
            score_cutoff=self.fuzzy_threshold * 100,
        )
        if result is None:
            return None

        matched, score, _ = result
        logger.info(f"Fuzzy matched quiz name '{quiz_name}' -> '{self._lowered[matched]}' (score={score:.1f})")
        return self._lowered[matched]

    def lookup_quiz_id(self, quiz_name: Optional[str]) -> Optional[int]:
        """Flashcard set id for a spoken quiz name, or None if unknown."""
        name = self.resolve_quiz_name(quiz_name)
        if name is None:
            return None
        return self.lessons[name]


def default_catalog(enable_fuzzy_matching: bool = True, fuzzy_threshold: float = 0.85) -> LessonCatalog:
    """Catalog with the bundled history, science and math lessons."""
    return LessonCatalog(
        categories=DEFAULT_CATEGORIES,
        lessons=DEFAULT_LESSONS,
        enable_fuzzy_matching=enable_fuzzy_matching,
        fuzzy_threshold=fuzzy_threshold,
    )


def load_catalog(
    path: Union[str, Path],
    enable_fuzzy_matching: bool = True,
    fuzzy_threshold: float = 0.85,
) -> LessonCatalog:
    """
    Load a catalog from a JSON file.

    :param path: Path to a JSON file with "categories" and "lessons" objects
    :return: LessonCatalog built from the file
    :raises ConfigurationError: if the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        data = CatalogFile.model_validate(raw)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Catalog file does not exist: {path}") from e
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(f"Invalid catalog file {path}: {e}") from e

    logger.info(f"Loaded catalog from {path}: {len(data.categories)} categories, {len(data.lessons)} lessons")
    return LessonCatalog(
        categories={name: tuple(quizzes) for name, quizzes in data.categories.items()},
        lessons=data.lessons,
        enable_fuzzy_matching=enable_fuzzy_matching,
        fuzzy_threshold=fuzzy_threshold,
    )
