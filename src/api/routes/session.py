"""Watch session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from api.schemas import ErrorMessage, SessionStartRequest, SessionStatus
from errors import SessionAlreadyRunningError, StartupError
from services import SeedshotService


def get_router(service: SeedshotService) -> APIRouter:
    """Create a router bound to the provided seedshot service."""

    router = APIRouter(prefix="/session", tags=["session"])

    @router.get("", response_model=SessionStatus, summary="Report whether the seedshotter is running")
    def get_status() -> SessionStatus:
        return SessionStatus(**service.status())

    @router.post(
        "",
        status_code=status.HTTP_201_CREATED,
        response_model=SessionStatus,
        responses={
            status.HTTP_400_BAD_REQUEST: {"model": ErrorMessage},
            status.HTTP_409_CONFLICT: {"model": ErrorMessage},
        },
        summary="Start watching a log file",
    )
    def start_session(payload: SessionStartRequest) -> SessionStatus:
        try:
            service.start(
                payload.log_file,
                payload.output_file,
                trigger=payload.trigger,
                strategy=payload.strategy,
                poll_interval=payload.poll_interval,
            )
        except SessionAlreadyRunningError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except StartupError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return SessionStatus(**service.status())

    @router.post(
        "/stop",
        status_code=status.HTTP_202_ACCEPTED,
        response_model=SessionStatus,
        summary="Request the running session to stop",
    )
    def stop_session() -> SessionStatus:
        service.stop()
        return SessionStatus(**service.status())

    return router
