"""Tests for snapshot comparison."""

from routine_tracker.domain.routines import (
    DietChange,
    DietType,
    FieldChange,
    ItemModification,
    RoutineChanges,
    RoutineItem,
    ValueChange,
)
from routine_tracker.services.comparator import compare_snapshots
from tests.conftest import make_snapshot


def test_compare_snapshot_with_itself_reports_nothing() -> None:
    snapshot = make_snapshot(
        items=[
            RoutineItem(id="1", timing="am", timings=("am", "pm")),
            RoutineItem(id="2", frequency="daily", frequency_days=("mon",)),
        ]
    )

    changes = compare_snapshots(snapshot, snapshot)

    assert changes.diet_changed is None
    assert changes.macros_changed is None
    assert changes.started == []
    assert changes.stopped == []
    assert changes.modified == []
    assert not changes.has_changes


def test_compare_without_current_returns_empty_changes() -> None:
    previous = make_snapshot(items=[RoutineItem(id="1", timing="am")])

    assert compare_snapshots(previous, None) == RoutineChanges()
    assert compare_snapshots(None, None) == RoutineChanges()


def test_compare_without_previous_marks_everything_started() -> None:
    current = make_snapshot(
        diet_type=DietType.KETO, items=[RoutineItem(id="x", timing="am")]
    )

    changes = compare_snapshots(None, current)

    assert changes.diet_changed == DietChange(DietType.UNTRACKED, DietType.KETO)
    assert changes.started == [RoutineItem(id="x", timing="am")]
    assert changes.macros_changed is None
    assert changes.stopped == []
    assert changes.modified == []


def test_compare_without_previous_skips_untracked_diet() -> None:
    current = make_snapshot(diet_type=DietType.UNTRACKED)

    changes = compare_snapshots(None, current)

    assert changes.diet_changed is None
    assert not changes.has_changes


def test_compare_reports_macros_items_and_modifications() -> None:
    previous = make_snapshot(
        protein_g=150,
        carbs_g=20,
        fat_g=100,
        items=[RoutineItem(id="1", timing="am"), RoutineItem(id="2", timing="pm")],
    )
    current = make_snapshot(
        protein_g=160,
        carbs_g=20,
        fat_g=100,
        items=[RoutineItem(id="1", timing="pm"), RoutineItem(id="3", timing="am")],
    )

    changes = compare_snapshots(previous, current)

    assert changes.diet_changed is None
    assert changes.macros_changed == {"protein_g": ValueChange(150, 160)}
    assert changes.started == [RoutineItem(id="3", timing="am")]
    assert changes.stopped == [RoutineItem(id="2", timing="pm")]
    assert changes.modified == [
        ItemModification(
            item=RoutineItem(id="1", timing="pm"),
            changes=[FieldChange("timing", "am", "pm")],
        )
    ]


def test_compare_detects_diet_type_change() -> None:
    previous = make_snapshot(diet_type=DietType.KETO)
    current = make_snapshot(diet_type=DietType.VEGAN)

    changes = compare_snapshots(previous, current)

    assert changes.diet_changed == DietChange(DietType.KETO, DietType.VEGAN)
    assert changes.macros_changed is None


def test_compare_reports_macro_cleared_to_none() -> None:
    previous = make_snapshot(fat_g=100)
    current = make_snapshot(fat_g=None)

    changes = compare_snapshots(previous, current)

    assert changes.macros_changed == {"fat_g": ValueChange(100, None)}


def test_compare_partitions_item_ids() -> None:
    previous = make_snapshot(
        items=[
            RoutineItem(id="a", duration="10m"),
            RoutineItem(id="b", frequency="daily"),
            RoutineItem(id="c"),
        ]
    )
    current = make_snapshot(
        items=[
            RoutineItem(id="c"),
            RoutineItem(id="b", frequency="every_other_day"),
            RoutineItem(id="d", timing="noon"),
            RoutineItem(id="e"),
        ]
    )

    changes = compare_snapshots(previous, current)

    started = {item.id for item in changes.started}
    stopped = {item.id for item in changes.stopped}
    modified = [entry.item.id for entry in changes.modified]
    assert started == {"d", "e"}
    assert stopped == {"a"}
    assert modified == ["b"]
    assert started.isdisjoint(stopped)


def test_compare_modified_carries_new_item_value() -> None:
    previous = make_snapshot(items=[RoutineItem(id="1", name="Magnesium", timing="am")])
    current = make_snapshot(
        items=[RoutineItem(id="1", name="Magnesium glycinate", timing="bed")]
    )

    changes = compare_snapshots(previous, current)

    assert changes.modified[0].item.name == "Magnesium glycinate"
    assert [change.field for change in changes.modified[0].changes] == ["timing"]


def test_compare_ignores_untracked_item_fields() -> None:
    previous = make_snapshot(items=[RoutineItem(id="1", name="Creatine", category="a")])
    current = make_snapshot(items=[RoutineItem(id="1", name="Creatine HCl", category="b")])

    changes = compare_snapshots(previous, current)

    assert changes.modified == []
    assert not changes.has_changes
