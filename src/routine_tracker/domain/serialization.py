"""Conversion between routine domain models and their JSON payloads."""

from collections.abc import Mapping
from datetime import datetime
from uuid import UUID

from routine_tracker.domain.errors import MalformedSnapshotError
from routine_tracker.domain.routines import (
    MACRO_FIELDS,
    Diet,
    DietChange,
    DietType,
    FieldChange,
    ItemModification,
    MacroTargets,
    RoutineChanges,
    RoutineItem,
    RoutineSnapshot,
    RoutineVersion,
    ValueChange,
)

_ITEM_TEXT_FIELDS = (
    "timing",
    "frequency",
    "duration",
    "source",
    "source_id",
    "name",
    "category",
    "intake_form",
    "item_type",
    "exercise_type",
    "meal_type",
)
_ITEM_LIST_FIELDS = ("timings", "frequency_days")


def snapshot_from_dict(payload: object) -> RoutineSnapshot:
    """Parse a stored snapshot payload, rejecting missing diet or macro fields."""
    if not isinstance(payload, Mapping):
        raise MalformedSnapshotError("Snapshot must be an object")
    diet_payload = payload.get("diet")
    if not isinstance(diet_payload, Mapping):
        raise MalformedSnapshotError("Snapshot is missing diet settings")
    if "type" not in diet_payload:
        raise MalformedSnapshotError("Snapshot diet is missing its type")
    try:
        diet_type = DietType(diet_payload["type"])
    except ValueError as exc:
        raise MalformedSnapshotError(
            f"Unknown diet type: {diet_payload['type']!r}"
        ) from exc
    macros_payload = diet_payload.get("macros")
    if not isinstance(macros_payload, Mapping):
        raise MalformedSnapshotError("Snapshot diet is missing macro targets")
    macros = {}
    for name in MACRO_FIELDS:
        if name not in macros_payload:
            raise MalformedSnapshotError(f"Snapshot macros are missing {name}")
        macros[name] = _macro_value(name, macros_payload[name])

    items_payload = payload.get("items", [])
    if not isinstance(items_payload, list):
        raise MalformedSnapshotError("Snapshot items must be a list")
    return RoutineSnapshot(
        diet=Diet(
            type=diet_type,
            macros=MacroTargets(**macros),
            type_other=diet_payload.get("type_other"),
        ),
        items=tuple(item_from_dict(item) for item in items_payload),
    )


def item_from_dict(payload: object) -> RoutineItem:
    """Parse a routine item payload."""
    if not isinstance(payload, Mapping):
        raise MalformedSnapshotError("Routine item must be an object")
    item_id = payload.get("id")
    if item_id is None or item_id == "":
        raise MalformedSnapshotError("Routine item is missing its id")
    values: dict[str, object] = {"id": str(item_id)}
    for name in _ITEM_TEXT_FIELDS:
        value = payload.get(name)
        values[name] = None if value is None else str(value)
    for name in _ITEM_LIST_FIELDS:
        value = payload.get(name)
        if value is not None and not isinstance(value, list | tuple):
            raise MalformedSnapshotError(f"Routine item {item_id} {name} must be a list")
        values[name] = None if value is None else tuple(str(entry) for entry in value)
    quantity = payload.get("intake_quantity")
    values["intake_quantity"] = (
        float(quantity) if isinstance(quantity, int | float) else None
    )
    return RoutineItem(**values)


def snapshot_to_dict(snapshot: RoutineSnapshot) -> dict[str, object]:
    """Serialize a snapshot to its stored JSON shape."""
    macros = snapshot.diet.macros
    return {
        "diet": {
            "type": snapshot.diet.type.value,
            "type_other": snapshot.diet.type_other,
            "macros": {
                "protein_g": macros.protein_g,
                "carbs_g": macros.carbs_g,
                "fat_g": macros.fat_g,
            },
        },
        "items": [item_to_dict(item) for item in snapshot.items],
    }


def item_to_dict(item: RoutineItem) -> dict[str, object]:
    """Serialize an item, omitting absent fields."""
    payload: dict[str, object] = {"id": item.id}
    for name in (*_ITEM_TEXT_FIELDS, *_ITEM_LIST_FIELDS, "intake_quantity"):
        value = getattr(item, name)
        if value is None:
            continue
        payload[name] = list(value) if isinstance(value, tuple) else value
    return payload


def changes_to_dict(changes: RoutineChanges) -> dict[str, object]:
    """Serialize computed changes for audit storage and API responses."""
    diet_changed = None
    if changes.diet_changed is not None:
        diet_changed = {
            "from": changes.diet_changed.from_type.value,
            "to": changes.diet_changed.to_type.value,
        }
    macros_changed = None
    if changes.macros_changed is not None:
        macros_changed = {
            name: {"from": change.from_value, "to": change.to_value}
            for name, change in changes.macros_changed.items()
        }
    return {
        "diet_changed": diet_changed,
        "macros_changed": macros_changed,
        "started": [item_to_dict(item) for item in changes.started],
        "stopped": [item_to_dict(item) for item in changes.stopped],
        "modified": [
            {
                "item": item_to_dict(entry.item),
                "changes": [
                    {
                        "field": change.field,
                        "from": _plain(change.from_value),
                        "to": _plain(change.to_value),
                    }
                    for change in entry.changes
                ],
            }
            for entry in changes.modified
        ],
    }


def changes_from_dict(payload: Mapping[str, object]) -> RoutineChanges:
    """Parse stored changes back into domain objects."""
    try:
        return _parse_changes(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise MalformedSnapshotError("Stored routine changes are malformed") from exc


def version_from_row(row: Mapping[str, object]) -> RoutineVersion:
    """Build a routine version from a database row or API payload."""
    try:
        changes_payload = row.get("changes")
        return RoutineVersion(
            id=UUID(str(row["id"])),
            version_number=int(row["version_number"]),
            snapshot=snapshot_from_dict(row.get("snapshot")),
            saved_at=datetime.fromisoformat(str(row["created_at"])),
            reason=row.get("reason"),
            changes=(
                changes_from_dict(changes_payload)
                if isinstance(changes_payload, Mapping)
                else None
            ),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedSnapshotError("Stored routine version is malformed") from exc


def _parse_changes(payload: Mapping[str, object]) -> RoutineChanges:
    diet_payload = payload.get("diet_changed")
    diet_changed = None
    if isinstance(diet_payload, Mapping):
        diet_changed = DietChange(
            from_type=DietType(diet_payload["from"]),
            to_type=DietType(diet_payload["to"]),
        )
    macros_payload = payload.get("macros_changed")
    macros_changed = None
    if isinstance(macros_payload, Mapping) and macros_payload:
        macros_changed = {
            name: ValueChange(from_value=entry.get("from"), to_value=entry.get("to"))
            for name, entry in macros_payload.items()
        }
    modified = [
        ItemModification(
            item=item_from_dict(entry["item"]),
            changes=[
                FieldChange(
                    field=change["field"],
                    from_value=_restore(change.get("from")),
                    to_value=_restore(change.get("to")),
                )
                for change in entry.get("changes", [])
            ],
        )
        for entry in payload.get("modified") or []
    ]
    return RoutineChanges(
        diet_changed=diet_changed,
        macros_changed=macros_changed,
        started=[item_from_dict(item) for item in payload.get("started") or []],
        stopped=[item_from_dict(item) for item in payload.get("stopped") or []],
        modified=modified,
    )


def version_to_dict(version: RoutineVersion) -> dict[str, object]:
    """Serialize a routine version in the row shape used by the API."""
    return {
        "id": str(version.id),
        "version_number": version.version_number,
        "snapshot": snapshot_to_dict(version.snapshot),
        "changes": (
            changes_to_dict(version.changes) if version.changes is not None else None
        ),
        "reason": version.reason,
        "created_at": version.saved_at.isoformat(),
    }


def _macro_value(name: str, value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedSnapshotError(f"Macro target {name} must be a number")
    return value


def _plain(value: object) -> object:
    return list(value) if isinstance(value, tuple) else value


def _restore(value: object) -> object:
    return tuple(value) if isinstance(value, list) else value
