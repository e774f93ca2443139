"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from supabase import create_client

from routine_tracker.adapters.supabase_routine_source_repository import (
    SupabaseRoutineSourceRepository,
)
from routine_tracker.adapters.supabase_routine_version_repository import (
    SupabaseRoutineVersionRepository,
)
from routine_tracker.config import Settings
from routine_tracker.services.change_tracker import ChangeTracker
from routine_tracker.services.gateways import LocalVersionStoreGateway
from routine_tracker.services.snapshots import SnapshotBuilder
from routine_tracker.services.versions import RoutineVersionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    version_service: RoutineVersionService
    close_resources: Callable[[], Awaitable[None]]

    def change_tracker(self, user_id: UUID) -> ChangeTracker:
        """Create an editing session tracker for a user."""
        return ChangeTracker(LocalVersionStoreGateway(self.version_service, user_id))


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    version_service = RoutineVersionService(
        repository=SupabaseRoutineVersionRepository(supabase_client),
        snapshot_builder=SnapshotBuilder(
            SupabaseRoutineSourceRepository(supabase_client)
        ),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        version_service=version_service,
        close_resources=close_resources,
    )
