"""Routine version history endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from routine_tracker.api.models import SaveVersionRequest  # noqa: TC001
from routine_tracker.domain.errors import (
    NoChangesToSaveError,
    RoutineVersionNotFoundError,
)
from routine_tracker.domain.serialization import snapshot_to_dict, version_to_dict

if TYPE_CHECKING:
    from routine_tracker.containers import AppContainer

_logger = logging.getLogger(__name__)


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(
    prefix="/api/v1/routine-versions",
    tags=["routine-versions"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
async def list_versions(
    request: Request,
    x_user_id: UUID = Header(),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> JSONResponse:
    """Return the user's routine history, newest first."""
    container: AppContainer = request.app.state.container
    page_size = limit if limit is not None else container.settings.history_page_size
    try:
        versions = container.version_service.list_versions(
            x_user_id, limit=page_size, offset=offset
        )
    except Exception:
        _logger.exception("Failed to list routine versions")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    return _success([version_to_dict(version) for version in versions])


@router.get("/latest")
async def latest_version(request: Request, x_user_id: UUID = Header()) -> JSONResponse:
    """Return the most recent routine version or null."""
    container: AppContainer = request.app.state.container
    try:
        version = container.version_service.get_latest(x_user_id)
    except Exception:
        _logger.exception("Failed to load latest routine version")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    return _success(version_to_dict(version) if version is not None else None)


@router.get("/current-snapshot")
async def current_snapshot(
    request: Request, x_user_id: UUID = Header()
) -> JSONResponse:
    """Return the live routine state that has not been saved yet."""
    container: AppContainer = request.app.state.container
    try:
        snapshot = container.version_service.current_snapshot(x_user_id)
    except Exception:
        _logger.exception("Failed to build current routine snapshot")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    return _success(snapshot_to_dict(snapshot))


@router.get("/{version_id}")
async def get_version(
    version_id: UUID, request: Request, x_user_id: UUID = Header()
) -> JSONResponse:
    """Return a single routine version."""
    container: AppContainer = request.app.state.container
    try:
        version = container.version_service.get_version(x_user_id, version_id)
    except RoutineVersionNotFoundError:
        return _failure(status.HTTP_404_NOT_FOUND, "Routine version not found")
    except Exception:
        _logger.exception("Failed to load routine version %s", version_id)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    return _success(version_to_dict(version))


@router.post("")
async def save_version(
    request: Request,
    payload: SaveVersionRequest | None = None,
    x_user_id: UUID = Header(),
) -> JSONResponse:
    """Save the live routine to the changelog as a new version."""
    container: AppContainer = request.app.state.container
    reason = payload.reason if payload else None
    try:
        version = container.version_service.save_version(x_user_id, reason=reason)
    except NoChangesToSaveError as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc), code="no_changes")
    except Exception:
        _logger.exception("Failed to save routine version")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    return _success(version_to_dict(version), status_code=status.HTTP_201_CREATED)


def _success(data: object, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": data, "timestamp": _timestamp()},
    )


def _failure(status_code: int, error: str, code: str | None = None) -> JSONResponse:
    content: dict[str, object] = {
        "success": False,
        "error": error,
        "timestamp": _timestamp(),
    }
    if code is not None:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


def _timestamp() -> str:
    return datetime.now(tz=UTC).isoformat()
