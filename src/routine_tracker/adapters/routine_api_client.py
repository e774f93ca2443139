"""HTTP client for the routine versions API."""

from dataclasses import dataclass
from uuid import UUID

import httpx

from routine_tracker.domain.errors import GatewaySaveError, NoChangesToSaveError
from routine_tracker.domain.routines import RoutineSnapshot, RoutineVersion
from routine_tracker.domain.serialization import snapshot_from_dict, version_from_row
from routine_tracker.services.change_tracker import VersionStoreGateway

_NO_CHANGES_CODE = "no_changes"


@dataclass
class HttpxRoutineVersionClient(VersionStoreGateway):
    """Version store gateway talking to the routine versions API with httpx."""

    base_url: str
    api_token: str
    user_id: UUID
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, api_token: str, user_id: UUID
    ) -> "HttpxRoutineVersionClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            api_token=api_token,
            user_id=user_id,
            http_client=httpx.AsyncClient(),
        )

    async def load_latest_version(self) -> RoutineVersion | None:
        """Fetch the most recent saved version."""
        data = await self._get("/latest")
        if data is None:
            return None
        return version_from_row(data)

    async def load_current_snapshot(self) -> RoutineSnapshot:
        """Fetch the live, unsaved routine snapshot."""
        return snapshot_from_dict(await self._get("/current-snapshot"))

    async def save_version(self, reason: str | None = None) -> RoutineVersion:
        """Ask the API to save the live routine as a new version."""
        response = await self.http_client.post(
            self._url(""), json={"reason": reason}, headers=self._headers(), timeout=15
        )
        if response.status_code == httpx.codes.BAD_REQUEST:
            payload = response.json()
            message = str(payload.get("error", "Routine version was rejected"))
            if payload.get("code") == _NO_CHANGES_CODE:
                raise NoChangesToSaveError(message)
            raise GatewaySaveError(message)
        response.raise_for_status()
        return version_from_row(response.json()["data"])

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get(self, path: str) -> object:
        response = await self.http_client.get(
            self._url(path), headers=self._headers(), timeout=15
        )
        response.raise_for_status()
        return response.json()["data"]

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/v1/routine-versions{path}"

    def _headers(self) -> dict[str, str]:
        return {"X-Api-Token": self.api_token, "X-User-Id": str(self.user_id)}
