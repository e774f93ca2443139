"""Supabase repository for the rows a routine snapshot is built from."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from routine_tracker.services.snapshots import RoutineSourceRepository


@dataclass
class SupabaseRoutineSourceRepository(RoutineSourceRepository):
    """Reads diet settings and scheduled items from Supabase."""

    client: Client

    def get_diet(self, user_id: UUID) -> dict[str, object] | None:
        """Return the user's diet row."""
        response = (
            self.client.table("user_diet")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def list_active_supplements(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active supplements."""
        return self._list_active("supplements", user_id)

    def list_active_equipment(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active equipment."""
        return self._list_active("equipment", user_id)

    def list_active_schedule_items(self, user_id: UUID) -> list[dict[str, object]]:
        """Return active schedule items."""
        return self._list_active("schedule_items", user_id)

    def list_routine_items(self, user_id: UUID) -> list[dict[str, object]]:
        """Return the items of every routine the user owns."""
        response = (
            self.client.table("routines")
            .select("*, items:routine_items(*)")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [
            item for routine in response.data or [] for item in routine.get("items") or []
        ]

    def _list_active(self, table: str, user_id: UUID) -> list[dict[str, object]]:
        response = (
            self.client.table(table)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("is_active", True)
            .execute()
        )
        return list(response.data or [])
