from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class ReleaseNoteType(str, Enum):
    """Release note categories as stored in the ``release_note_type`` column."""
    BREAKING_CHANGE = "BREAKING_CHANGE"
    DEPRECATION = "DEPRECATION"
    FEATURE = "FEATURE"
    FIX = "FIX"
    ISSUE = "ISSUE"
    LIBRARIES = "LIBRARIES"
    NON_BREAKING_CHANGE = "NON_BREAKING_CHANGE"
    SECURITY_BULLETIN = "SECURITY_BULLETIN"
    SERVICE_ANNOUNCEMENT = "SERVICE_ANNOUNCEMENT"

    @classmethod
    def labels(cls) -> List[str]:
        return [t.value for t in cls]


class ReleaseNoteSourceError(RuntimeError):
    """Connection, query execution or row decoding failure."""


@dataclass(frozen=True)
class Product:
    """A Google Cloud product with release notes in the lookback window."""
    name: str


@dataclass(frozen=True)
class ReleaseNote:
    """A single (category, description) pair."""
    release_note_type: str
    description: str


def validate_cadence(cadence_days: int) -> int:
    """Return the lookback window if it is a non-negative integer."""
    # bool is an int subclass; True would silently become a one-day window
    if isinstance(cadence_days, bool) or not isinstance(cadence_days, int):
        raise ValueError(f"Lookback window must be an integer, got {cadence_days!r}")
    if cadence_days < 0:
        raise ValueError(f"Lookback window must not be negative, got {cadence_days}")
    return cadence_days


@dataclass(frozen=True)
class ReleaseNoteQuery:
    """
    Category filter plus lookback window shared by product and note lookups.

    A query either targets one category (a dedicated channel) or a set of
    categories (the unassigned set routed to the general channel).
    """
    cadence_days: int
    release_note_types: Tuple[str, ...] = field(default_factory=tuple)
    single_type: bool = False

    def __post_init__(self):
        validate_cadence(self.cadence_days)
        if self.single_type and len(self.release_note_types) != 1:
            raise ValueError("A single-category query needs exactly one release note type")

    @classmethod
    def for_type(cls, cadence_days: int, release_note_type: str) -> "ReleaseNoteQuery":
        return cls(cadence_days=cadence_days, release_note_types=(str(release_note_type),), single_type=True)

    @classmethod
    def for_types(cls, cadence_days: int, release_note_types: Iterable[str]) -> "ReleaseNoteQuery":
        return cls(cadence_days=cadence_days, release_note_types=tuple(str(t) for t in release_note_types))

    @property
    def release_note_type(self) -> Optional[str]:
        return self.release_note_types[0] if self.single_type else None

    def is_empty(self) -> bool:
        return not self.release_note_types

    def describe(self) -> str:
        if self.single_type:
            return self.release_note_types[0]
        return "unassigned types [" + ", ".join(self.release_note_types) + "]"


class IReleaseNoteSource(ABC):
    """Interface for fetching products and release notes from the warehouse."""

    @abstractmethod
    def get_products(self, query: ReleaseNoteQuery) -> List[Product]:
        """Distinct products with at least one matching note, sorted by name."""
        pass

    @abstractmethod
    def get_release_notes(self, product: str, query: ReleaseNoteQuery) -> List[ReleaseNote]:
        """Deduplicated notes for one product, sorted by category."""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release the underlying client."""
        pass
