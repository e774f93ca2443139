"""Domain models for routine snapshots, versions and changes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from routine_tracker.domain.errors import MalformedSnapshotError

MACRO_FIELDS = ("protein_g", "carbs_g", "fat_g")


class DietType(StrEnum):
    """Diet a user follows; UNTRACKED means no diet tracking is configured."""

    UNTRACKED = "untracked"
    STANDARD = "standard"
    KETO = "keto"
    CARNIVORE = "carnivore"
    VEGAN = "vegan"
    VEGETARIAN = "vegetarian"
    MEDITERRANEAN = "mediterranean"
    PALEO = "paleo"
    LOW_FODMAP = "low_fodmap"
    OTHER = "other"


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro targets in grams. None means no target is set."""

    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None


@dataclass(frozen=True)
class Diet:
    """Diet settings captured in a snapshot."""

    type: DietType = DietType.UNTRACKED
    macros: MacroTargets = field(default_factory=MacroTargets)
    type_other: str | None = None


@dataclass(frozen=True)
class RoutineItem:
    """A trackable action in a routine (supplement, equipment, habit, ...).

    The ``id`` is stable across snapshots. Only timing, timings, frequency,
    frequency_days and duration take part in change detection; the remaining
    fields describe the item for display.
    """

    id: str
    timing: str | None = None
    timings: tuple[str, ...] | None = None
    frequency: str | None = None
    frequency_days: tuple[str, ...] | None = None
    duration: str | None = None
    source: str | None = None
    source_id: str | None = None
    name: str | None = None
    category: str | None = None
    intake_quantity: float | None = None
    intake_form: str | None = None
    item_type: str | None = None
    exercise_type: str | None = None
    meal_type: str | None = None

    def __post_init__(self) -> None:
        if self.timings is not None:
            object.__setattr__(self, "timings", tuple(self.timings))
        if self.frequency_days is not None:
            object.__setattr__(self, "frequency_days", tuple(self.frequency_days))


@dataclass(frozen=True)
class RoutineSnapshot:
    """Immutable point-in-time view of a user's routine."""

    diet: Diet
    items: tuple[RoutineItem, ...] = ()

    def __post_init__(self) -> None:
        items = tuple(self.items)
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                raise MalformedSnapshotError(f"Duplicate routine item id: {item.id}")
            seen.add(item.id)
        object.__setattr__(self, "items", items)


@dataclass(frozen=True)
class DietChange:
    """Transition between two diet types."""

    from_type: DietType
    to_type: DietType


@dataclass(frozen=True)
class ValueChange:
    """Before and after values of a single macro target."""

    from_value: float | None
    to_value: float | None


@dataclass(frozen=True)
class FieldChange:
    """A tracked item field whose value differs between two snapshots."""

    field: str
    from_value: object
    to_value: object


@dataclass(frozen=True)
class ItemModification:
    """An item present in both snapshots with at least one changed field."""

    item: RoutineItem
    changes: list[FieldChange]


@dataclass(frozen=True)
class RoutineChanges:
    """Structured difference between two routine snapshots."""

    diet_changed: DietChange | None = None
    macros_changed: dict[str, ValueChange] | None = None
    started: list[RoutineItem] = field(default_factory=list)
    stopped: list[RoutineItem] = field(default_factory=list)
    modified: list[ItemModification] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Return True when any diet, macro or item difference was found."""
        return (
            self.diet_changed is not None
            or self.macros_changed is not None
            or bool(self.started)
            or bool(self.stopped)
            or bool(self.modified)
        )


@dataclass(frozen=True)
class RoutineVersion:
    """A persisted, append-only routine snapshot."""

    id: UUID
    version_number: int
    snapshot: RoutineSnapshot
    saved_at: datetime
    reason: str | None = None
    changes: RoutineChanges | None = None
