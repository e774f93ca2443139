"""Unsaved-change tracking for a routine editing session."""

import asyncio
import logging
from enum import StrEnum
from typing import Protocol

from routine_tracker.domain.errors import (
    GatewayLoadError,
    GatewaySaveError,
    MalformedSnapshotError,
    SaveInProgressError,
    TrackerNotReadyError,
)
from routine_tracker.domain.routines import (
    RoutineChanges,
    RoutineSnapshot,
    RoutineVersion,
)
from routine_tracker.services.comparator import compare_snapshots

_logger = logging.getLogger(__name__)


class VersionStoreGateway(Protocol):
    """Interface to the store holding persisted routine versions."""

    async def load_latest_version(self) -> RoutineVersion | None:
        """Return the most recently saved version, if any."""

    async def load_current_snapshot(self) -> RoutineSnapshot:
        """Return the live routine state."""

    async def save_version(self, reason: str | None = None) -> RoutineVersion:
        """Persist the live routine state and return the stored version."""


class TrackerState(StrEnum):
    """Lifecycle states of a change tracker."""

    UNINITIALIZED = "uninitialized"
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class ChangeTracker:
    """Tracks the difference between the last saved routine and the working one.

    The baseline is loaded from the gateway once per session. The working
    snapshot is supplied by the caller through :meth:`update` (or fetched with
    :meth:`refresh`) and every update recomputes the changes against the
    baseline.
    """

    def __init__(self, gateway: VersionStoreGateway) -> None:
        self.gateway = gateway
        self._baseline: RoutineSnapshot | None = None
        self._current: RoutineSnapshot | None = None
        self._changes = RoutineChanges()
        self._initialized = False
        self._pending_loads = 0
        self._saving = False
        self._closed = False
        self._init_lock = asyncio.Lock()

    @property
    def state(self) -> TrackerState:
        """Return the current lifecycle state."""
        if not self._initialized:
            return TrackerState.UNINITIALIZED
        if self._saving:
            return TrackerState.SAVING
        return TrackerState.DIRTY if self._changes.has_changes else TrackerState.CLEAN

    @property
    def baseline(self) -> RoutineSnapshot | None:
        """Return the last snapshot known to be persisted."""
        return self._baseline

    @property
    def current(self) -> RoutineSnapshot | None:
        """Return the working snapshot last supplied to the tracker."""
        return self._current

    @property
    def changes(self) -> RoutineChanges | None:
        """Return the last computed changes, or None before initialization."""
        if not self._initialized:
            return None
        return self._changes

    @property
    def has_unsaved_changes(self) -> bool:
        """Return True when the working snapshot differs from the baseline."""
        return self._initialized and self._changes.has_changes

    @property
    def is_loading(self) -> bool:
        """Return True until the baseline is loaded or while a load runs."""
        return self._pending_loads > 0 or not self._initialized

    @property
    def is_saving(self) -> bool:
        """Return True while a save is in flight."""
        return self._saving

    async def initialize(self) -> None:
        """Load the baseline from the latest saved version.

        Runs at most once per tracker; a failed load leaves the tracker
        uninitialized so it can be retried.
        """
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            self._pending_loads += 1
            try:
                latest = await self.gateway.load_latest_version()
            except (GatewayLoadError, MalformedSnapshotError):
                raise
            except Exception as exc:
                raise GatewayLoadError("Failed to load latest routine version") from exc
            finally:
                self._pending_loads -= 1
            self._baseline = latest.snapshot if latest is not None else None
            self._initialized = True
            self._recompute()

    def update(self, current: RoutineSnapshot | None) -> RoutineChanges | None:
        """Set the working snapshot and return the recomputed changes."""
        self._current = current
        if self._initialized:
            self._recompute()
        return self.changes

    async def refresh(self) -> RoutineChanges | None:
        """Fetch the live snapshot from the gateway and recompute changes."""
        await self.initialize()
        self._pending_loads += 1
        try:
            current = await self.gateway.load_current_snapshot()
        except (GatewayLoadError, MalformedSnapshotError):
            raise
        except Exception as exc:
            raise GatewayLoadError("Failed to load current routine snapshot") from exc
        finally:
            self._pending_loads -= 1
        return self.update(current)

    async def save(self, reason: str | None = None) -> RoutineVersion:
        """Persist the working routine and make it the new baseline."""
        if not self._initialized:
            raise TrackerNotReadyError("Routine baseline has not been loaded")
        if self._saving:
            raise SaveInProgressError("A routine save is already in progress")
        self._saving = True
        saving_snapshot = self._current
        try:
            version = await self.gateway.save_version(reason)
        except GatewaySaveError:
            _logger.warning("Routine version save was rejected", exc_info=True)
            raise
        except Exception as exc:
            _logger.warning("Routine version save failed", exc_info=True)
            raise GatewaySaveError("Failed to save routine version") from exc
        finally:
            self._saving = False

        if self._closed:
            _logger.info(
                "Ignoring routine version %s saved after tracker was closed",
                version.version_number,
            )
            return version
        self._baseline = version.snapshot
        # Updates received while the save was pending stay the working snapshot.
        if self._current is saving_snapshot:
            self._current = version.snapshot
        self._recompute()
        _logger.info("Saved routine version %s", version.version_number)
        return version

    def discard(self) -> None:
        """Reset the working snapshot to the baseline."""
        if not self._initialized:
            raise TrackerNotReadyError("Routine baseline has not been loaded")
        self._current = self._baseline
        self._recompute()

    def close(self) -> None:
        """Tear down the session; results of pending saves are not applied."""
        self._closed = True

    def _recompute(self) -> None:
        self._changes = compare_snapshots(self._baseline, self._current)
