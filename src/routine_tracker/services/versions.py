"""Routine version history service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from routine_tracker.domain.errors import (
    NoChangesToSaveError,
    RoutineVersionNotFoundError,
)
from routine_tracker.domain.routines import (
    RoutineChanges,
    RoutineSnapshot,
    RoutineVersion,
)
from routine_tracker.services.comparator import compare_snapshots
from routine_tracker.services.snapshots import SnapshotBuilder

_logger = logging.getLogger(__name__)


class RoutineVersionRepository(Protocol):
    """Persistence interface for routine versions."""

    def list_versions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[RoutineVersion]:
        """Return versions newest first."""

    def get_latest(self, user_id: UUID) -> RoutineVersion | None:
        """Return the version with the highest version number, if any."""

    def get_version(self, user_id: UUID, version_id: UUID) -> RoutineVersion | None:
        """Return a version by id, if it belongs to the user."""

    def create_version(  # noqa: PLR0913
        self,
        user_id: UUID,
        version_number: int,
        snapshot: RoutineSnapshot,
        changes: RoutineChanges,
        reason: str | None,
    ) -> RoutineVersion:
        """Insert a version row and return it."""


@dataclass
class RoutineVersionService:
    """Application service for the append-only routine changelog."""

    repository: RoutineVersionRepository
    snapshot_builder: SnapshotBuilder

    def list_versions(
        self, user_id: UUID, limit: int = 50, offset: int = 0
    ) -> list[RoutineVersion]:
        """Return a page of the user's routine history, newest first."""
        return self.repository.list_versions(user_id, limit=limit, offset=offset)

    def get_latest(self, user_id: UUID) -> RoutineVersion | None:
        """Return the most recently saved version."""
        return self.repository.get_latest(user_id)

    def get_version(self, user_id: UUID, version_id: UUID) -> RoutineVersion:
        """Return a specific version or raise if it does not exist."""
        version = self.repository.get_version(user_id, version_id)
        if version is None:
            raise RoutineVersionNotFoundError(f"Routine version {version_id} not found")
        return version

    def current_snapshot(self, user_id: UUID) -> RoutineSnapshot:
        """Return the user's live, unsaved routine."""
        return self.snapshot_builder.build(user_id)

    def save_version(self, user_id: UUID, reason: str | None = None) -> RoutineVersion:
        """Save the live routine as a new version when it differs from the latest."""
        snapshot = self.snapshot_builder.build(user_id)
        latest = self.repository.get_latest(user_id)
        changes = compare_snapshots(
            latest.snapshot if latest is not None else None, snapshot
        )
        if not changes.has_changes:
            raise NoChangesToSaveError("No changes to save")

        version_number = (latest.version_number if latest is not None else 0) + 1
        version = self.repository.create_version(
            user_id=user_id,
            version_number=version_number,
            snapshot=snapshot,
            changes=changes,
            reason=reason,
        )
        _logger.info(
            "Saved routine version %s for user %s", version.version_number, user_id
        )
        return version
