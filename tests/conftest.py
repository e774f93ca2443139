"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from routine_tracker.config import Settings
from routine_tracker.containers import AppContainer
from routine_tracker.domain.routines import (
    Diet,
    DietType,
    MacroTargets,
    RoutineChanges,
    RoutineItem,
    RoutineSnapshot,
    RoutineVersion,
)
from routine_tracker.services.change_tracker import VersionStoreGateway
from routine_tracker.services.snapshots import RoutineSourceRepository, SnapshotBuilder
from routine_tracker.services.versions import (
    RoutineVersionRepository,
    RoutineVersionService,
)


def make_snapshot(
    diet_type: DietType = DietType.KETO,
    protein_g: float | None = 150,
    carbs_g: float | None = 20,
    fat_g: float | None = 100,
    items: list[RoutineItem] | None = None,
) -> RoutineSnapshot:
    return RoutineSnapshot(
        diet=Diet(
            type=diet_type,
            macros=MacroTargets(protein_g=protein_g, carbs_g=carbs_g, fat_g=fat_g),
        ),
        items=tuple(items or []),
    )


def make_version(
    snapshot: RoutineSnapshot, version_number: int = 1, reason: str | None = None
) -> RoutineVersion:
    return RoutineVersion(
        id=uuid4(),
        version_number=version_number,
        snapshot=snapshot,
        saved_at=datetime.now(tz=UTC),
        reason=reason,
    )


@dataclass
class InMemoryRoutineVersionRepository(RoutineVersionRepository):
    """In-memory routine version repository for tests."""

    versions: dict[UUID, list[RoutineVersion]] = field(default_factory=dict)

    def list_versions(
        self, user_id: UUID, limit: int, offset: int
    ) -> list[RoutineVersion]:
        ordered = sorted(
            self.versions.get(user_id, []),
            key=lambda version: version.version_number,
            reverse=True,
        )
        return ordered[offset : offset + limit]

    def get_latest(self, user_id: UUID) -> RoutineVersion | None:
        ordered = self.list_versions(user_id, limit=1, offset=0)
        return ordered[0] if ordered else None

    def get_version(self, user_id: UUID, version_id: UUID) -> RoutineVersion | None:
        for version in self.versions.get(user_id, []):
            if version.id == version_id:
                return version
        return None

    def create_version(  # noqa: PLR0913
        self,
        user_id: UUID,
        version_number: int,
        snapshot: RoutineSnapshot,
        changes: RoutineChanges,
        reason: str | None,
    ) -> RoutineVersion:
        version = RoutineVersion(
            id=uuid4(),
            version_number=version_number,
            snapshot=snapshot,
            saved_at=datetime.now(tz=UTC),
            reason=reason,
            changes=changes,
        )
        self.versions.setdefault(user_id, []).append(version)
        return version


@dataclass
class InMemoryRoutineSourceRepository(RoutineSourceRepository):
    """In-memory source rows for snapshot building."""

    diet: dict[str, object] | None = None
    supplements: list[dict[str, object]] = field(default_factory=list)
    equipment: list[dict[str, object]] = field(default_factory=list)
    schedule_items: list[dict[str, object]] = field(default_factory=list)
    routine_items: list[dict[str, object]] = field(default_factory=list)

    def get_diet(self, user_id: UUID) -> dict[str, object] | None:
        return self.diet

    def list_active_supplements(self, user_id: UUID) -> list[dict[str, object]]:
        return self.supplements

    def list_active_equipment(self, user_id: UUID) -> list[dict[str, object]]:
        return self.equipment

    def list_active_schedule_items(self, user_id: UUID) -> list[dict[str, object]]:
        return self.schedule_items

    def list_routine_items(self, user_id: UUID) -> list[dict[str, object]]:
        return self.routine_items


@dataclass
class FakeVersionStoreGateway(VersionStoreGateway):
    """Gateway that keeps versions in memory and saves the live snapshot."""

    live: RoutineSnapshot | None = None
    latest: RoutineVersion | None = None
    load_error: Exception | None = None
    save_error: Exception | None = None
    save_gate: asyncio.Event | None = None
    current_gates: list[asyncio.Event] = field(default_factory=list)
    load_calls: int = 0
    saved_reasons: list[str | None] = field(default_factory=list)

    async def load_latest_version(self) -> RoutineVersion | None:
        self.load_calls += 1
        if self.load_error is not None:
            raise self.load_error
        return self.latest

    async def load_current_snapshot(self) -> RoutineSnapshot:
        if self.current_gates:
            await self.current_gates.pop(0).wait()
        if self.load_error is not None:
            raise self.load_error
        assert self.live is not None
        return self.live

    async def save_version(self, reason: str | None = None) -> RoutineVersion:
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.save_error is not None:
            raise self.save_error
        assert self.live is not None
        self.saved_reasons.append(reason)
        number = self.latest.version_number + 1 if self.latest else 1
        self.latest = make_version(self.live, version_number=number, reason=reason)
        return self.latest


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
    )


@pytest.fixture
def source_repository() -> InMemoryRoutineSourceRepository:
    return InMemoryRoutineSourceRepository()


@pytest.fixture
def version_repository() -> InMemoryRoutineVersionRepository:
    return InMemoryRoutineVersionRepository()


@pytest.fixture
def version_service(
    source_repository: InMemoryRoutineSourceRepository,
    version_repository: InMemoryRoutineVersionRepository,
) -> RoutineVersionService:
    return RoutineVersionService(
        repository=version_repository,
        snapshot_builder=SnapshotBuilder(source_repository),
    )


@pytest.fixture
def container(
    settings: Settings, version_service: RoutineVersionService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        version_service=version_service,
        close_resources=close_resources,
    )
