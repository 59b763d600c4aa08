"""Persisted settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from api.schemas import ErrorMessage, SettingsPayload, SettingsUpdate
from errors import SettingsError
from models import SeedshotSettings
from services import SeedshotService


def _to_payload(settings: SeedshotSettings) -> SettingsPayload:
    return SettingsPayload(**settings.to_dict())


def get_router(service: SeedshotService) -> APIRouter:
    router = APIRouter(prefix="/settings", tags=["settings"])

    @router.get("", response_model=SettingsPayload)
    def get_settings() -> SettingsPayload:
        return _to_payload(service.settings())

    @router.put(
        "",
        response_model=SettingsPayload,
        responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorMessage}},
    )
    def update_settings(payload: SettingsUpdate) -> SettingsPayload:
        changes = payload.model_dump(exclude_unset=True)
        try:
            updated = service.update_settings(**changes)
        except SettingsError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
            ) from exc
        return _to_payload(updated)

    return router
