"""In-process version store gateway backed by the version service."""

from dataclasses import dataclass
from uuid import UUID

from routine_tracker.domain.errors import (
    GatewayLoadError,
    GatewaySaveError,
    MalformedSnapshotError,
)
from routine_tracker.domain.routines import RoutineSnapshot, RoutineVersion
from routine_tracker.services.change_tracker import VersionStoreGateway
from routine_tracker.services.versions import RoutineVersionService


@dataclass
class LocalVersionStoreGateway(VersionStoreGateway):
    """Gateway for one user that calls the version service directly."""

    service: RoutineVersionService
    user_id: UUID

    async def load_latest_version(self) -> RoutineVersion | None:
        """Return the user's latest saved version."""
        try:
            return self.service.get_latest(self.user_id)
        except MalformedSnapshotError:
            raise
        except Exception as exc:
            raise GatewayLoadError("Failed to load latest routine version") from exc

    async def load_current_snapshot(self) -> RoutineSnapshot:
        """Return the user's live routine."""
        try:
            return self.service.current_snapshot(self.user_id)
        except MalformedSnapshotError:
            raise
        except Exception as exc:
            raise GatewayLoadError("Failed to build current routine snapshot") from exc

    async def save_version(self, reason: str | None = None) -> RoutineVersion:
        """Persist the user's live routine."""
        try:
            return self.service.save_version(self.user_id, reason=reason)
        except GatewaySaveError:
            raise
        except Exception as exc:
            raise GatewaySaveError("Failed to save routine version") from exc
