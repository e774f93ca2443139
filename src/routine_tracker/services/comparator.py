"""Change detection between two routine snapshots."""

from collections import Counter

from routine_tracker.domain.routines import (
    DietChange,
    DietType,
    FieldChange,
    ItemModification,
    RoutineChanges,
    RoutineItem,
    RoutineSnapshot,
    ValueChange,
)


def compare_snapshots(
    previous: RoutineSnapshot | None, current: RoutineSnapshot | None
) -> RoutineChanges:
    """Compute the changes that turn ``previous`` into ``current``.

    Without a current snapshot there is nothing to report. Without a previous
    snapshot every current item counts as started, and a tracked diet counts
    as a change from untracked; macro targets are not reported in that case.
    """
    if current is None:
        return RoutineChanges()

    if previous is None:
        diet_changed = None
        if current.diet.type != DietType.UNTRACKED:
            diet_changed = DietChange(
                from_type=DietType.UNTRACKED, to_type=current.diet.type
            )
        return RoutineChanges(diet_changed=diet_changed, started=list(current.items))

    diet_changed = None
    if previous.diet.type != current.diet.type:
        diet_changed = DietChange(
            from_type=previous.diet.type, to_type=current.diet.type
        )

    previous_by_id = {item.id: item for item in previous.items}
    current_by_id = {item.id: item for item in current.items}

    started = [
        item for item_id, item in current_by_id.items() if item_id not in previous_by_id
    ]
    stopped = [
        item for item_id, item in previous_by_id.items() if item_id not in current_by_id
    ]
    modified = []
    for item_id, current_item in current_by_id.items():
        previous_item = previous_by_id.get(item_id)
        if previous_item is None:
            continue
        field_changes = diff_fields(previous_item, current_item)
        if field_changes:
            modified.append(ItemModification(item=current_item, changes=field_changes))

    return RoutineChanges(
        diet_changed=diet_changed,
        macros_changed=_diff_macros(previous, current),
        started=started,
        stopped=stopped,
        modified=modified,
    )


def diff_fields(previous: RoutineItem, current: RoutineItem) -> list[FieldChange]:
    """Return the tracked fields that differ between two versions of an item."""
    changes: list[FieldChange] = []
    if previous.timing != current.timing:
        changes.append(FieldChange("timing", previous.timing, current.timing))
    if not _same_members(previous.timings, current.timings):
        changes.append(FieldChange("timings", previous.timings, current.timings))
    if previous.frequency != current.frequency:
        changes.append(FieldChange("frequency", previous.frequency, current.frequency))
    if not _same_members(previous.frequency_days, current.frequency_days):
        changes.append(
            FieldChange("frequency_days", previous.frequency_days, current.frequency_days)
        )
    if previous.duration != current.duration:
        changes.append(FieldChange("duration", previous.duration, current.duration))
    return changes


def _diff_macros(
    previous: RoutineSnapshot, current: RoutineSnapshot
) -> dict[str, ValueChange] | None:
    before = previous.diet.macros
    after = current.diet.macros
    changed: dict[str, ValueChange] = {}
    if before.protein_g != after.protein_g:
        changed["protein_g"] = ValueChange(before.protein_g, after.protein_g)
    if before.carbs_g != after.carbs_g:
        changed["carbs_g"] = ValueChange(before.carbs_g, after.carbs_g)
    if before.fat_g != after.fat_g:
        changed["fat_g"] = ValueChange(before.fat_g, after.fat_g)
    return changed or None


def _same_members(
    left: tuple[str, ...] | None, right: tuple[str, ...] | None
) -> bool:
    """Compare collections by members; an absent collection differs from an empty one."""
    if left is None or right is None:
        return left is right
    return Counter(left) == Counter(right)
