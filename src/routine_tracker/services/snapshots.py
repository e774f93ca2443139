"""Builds the live routine snapshot from a user's scheduled items."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from routine_tracker.domain.errors import MalformedSnapshotError
from routine_tracker.domain.routines import (
    Diet,
    DietType,
    MacroTargets,
    RoutineItem,
    RoutineSnapshot,
)

_DEFAULT_FREQUENCY = "daily"


class RoutineSourceRepository(Protocol):
    """Read access to the rows a routine snapshot is assembled from."""

    def get_diet(self, user_id: UUID) -> dict[str, object] | None:
        """Return the user's diet settings row, if present."""

    def list_active_supplements(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active supplement rows."""

    def list_active_equipment(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active equipment rows."""

    def list_active_schedule_items(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active schedule item rows (exercises, meals)."""

    def list_routine_items(self, user_id: UUID) -> list[dict[str, object]]:
        """Return items of all the user's routines."""


@dataclass
class SnapshotBuilder:
    """Assembles a routine snapshot from scheduled supplements, equipment and habits."""

    repository: RoutineSourceRepository

    def build(self, user_id: UUID) -> RoutineSnapshot:
        """Return the user's current routine snapshot."""
        items = [
            *(
                _supplement_item(row)
                for row in self.repository.list_active_supplements(user_id)
                if row.get("timings")
            ),
            *(
                _equipment_item(row)
                for row in self.repository.list_active_equipment(user_id)
                if row.get("usage_timing")
            ),
            *(
                _schedule_item(row)
                for row in self.repository.list_active_schedule_items(user_id)
                if row.get("timing")
            ),
            *(
                _routine_item(row)
                for row in self.repository.list_routine_items(user_id)
            ),
        ]
        return RoutineSnapshot(
            diet=_diet(self.repository.get_diet(user_id)), items=tuple(items)
        )


def _diet(row: dict[str, object] | None) -> Diet:
    if row is None:
        return Diet()
    raw_type = row.get("diet_type") or DietType.UNTRACKED.value
    try:
        diet_type = DietType(raw_type)
    except ValueError as exc:
        raise MalformedSnapshotError(f"Unknown diet type: {raw_type!r}") from exc
    return Diet(
        type=diet_type,
        macros=MacroTargets(
            protein_g=row.get("target_protein_g"),
            carbs_g=row.get("target_carbs_g"),
            fat_g=row.get("target_fat_g"),
        ),
        type_other=row.get("diet_type_other"),
    )


def _supplement_item(row: dict[str, object]) -> RoutineItem:
    timings = list(row["timings"])
    return RoutineItem(
        id=f"supplement-{row['id']}",
        source="supplement",
        source_id=str(row["id"]),
        name=row.get("name"),
        timing=timings[0] if timings else None,
        timings=tuple(timings),
        frequency=row.get("frequency") or _DEFAULT_FREQUENCY,
        frequency_days=_optional_tuple(row.get("frequency_days")),
        category=row.get("category"),
        intake_quantity=row.get("intake_quantity"),
        intake_form=row.get("intake_form"),
    )


def _equipment_item(row: dict[str, object]) -> RoutineItem:
    return RoutineItem(
        id=f"equipment-{row['id']}",
        source="equipment",
        source_id=str(row["id"]),
        name=row.get("name"),
        timing=row.get("usage_timing"),
        frequency=row.get("usage_frequency") or _DEFAULT_FREQUENCY,
        duration=row.get("usage_duration"),
    )


def _schedule_item(row: dict[str, object]) -> RoutineItem:
    return RoutineItem(
        id=f"schedule_item-{row['id']}",
        source="schedule_item",
        source_id=str(row["id"]),
        name=row.get("name"),
        timing=row.get("timing"),
        frequency=row.get("frequency"),
        frequency_days=_optional_tuple(row.get("frequency_days")),
        duration=row.get("duration"),
        item_type=row.get("item_type"),
        exercise_type=row.get("exercise_type"),
        meal_type=row.get("meal_type"),
    )


def _routine_item(row: dict[str, object]) -> RoutineItem:
    return RoutineItem(
        id=f"routine-{row['id']}",
        source="routine",
        source_id=str(row["id"]),
        name=row.get("title"),
        timing=row.get("time"),
        frequency=_DEFAULT_FREQUENCY,
        frequency_days=_optional_tuple(row.get("days")),
        duration=row.get("duration"),
    )


def _optional_tuple(value: object) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(value)
