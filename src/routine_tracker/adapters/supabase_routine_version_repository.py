"""Supabase-backed routine version repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from routine_tracker.domain.routines import (
    RoutineChanges,
    RoutineSnapshot,
    RoutineVersion,
)
from routine_tracker.domain.serialization import (
    changes_to_dict,
    snapshot_to_dict,
    version_from_row,
)
from routine_tracker.services.versions import RoutineVersionRepository

_COLUMNS = "id, user_id, version_number, snapshot, changes, reason, created_at"


@dataclass
class SupabaseRoutineVersionRepository(RoutineVersionRepository):
    """Supabase implementation for the routine_versions table."""

    client: Client

    def list_versions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[RoutineVersion]:
        """Return versions newest first."""
        response = (
            self.client.table("routine_versions")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("version_number", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [version_from_row(row) for row in response.data or []]

    def get_latest(self, user_id: UUID) -> RoutineVersion | None:
        """Return the version with the highest version number."""
        response = (
            self.client.table("routine_versions")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("version_number", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return version_from_row(response.data[0])

    def get_version(self, user_id: UUID, version_id: UUID) -> RoutineVersion | None:
        """Return a version by id for the user."""
        response = (
            self.client.table("routine_versions")
            .select(_COLUMNS)
            .eq("id", str(version_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return version_from_row(response.data[0])

    def create_version(  # noqa: PLR0913
        self,
        user_id: UUID,
        version_number: int,
        snapshot: RoutineSnapshot,
        changes: RoutineChanges,
        reason: str | None,
    ) -> RoutineVersion:
        """Insert a version row and return it."""
        response = (
            self.client.table("routine_versions")
            .insert(
                {
                    "user_id": str(user_id),
                    "version_number": version_number,
                    "snapshot": snapshot_to_dict(snapshot),
                    "changes": changes_to_dict(changes),
                    "reason": reason,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create routine version")
        return version_from_row(response.data[0])
