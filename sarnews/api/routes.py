"""Refresh trigger endpoints."""

import logging
import secrets
from typing import Any, Dict, Optional

import pendulum
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..config import Config
from ..health import evaluate_feed_health
from ..pipeline import RefreshOrchestrator, RefreshOutcome, RefreshThrottled, RefreshTrigger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_orchestrator(request: Request) -> RefreshOrchestrator:
    return request.app.state.orchestrator


def get_config(request: Request) -> Config:
    return request.app.state.config


def require_cron_secret(
    authorization: Optional[str] = Header(None),
    config: Config = Depends(get_config),
) -> None:
    """Bearer check for the scheduler."""
    secret = config.cron_secret
    if not secret:
        logger.error("Cron secret is not configured")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server configuration error")

    if not authorization or not secrets.compare_digest(authorization, f"Bearer {secret}"):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def require_admin_token(
    x_admin_token: Optional[str] = Header(None),
    config: Config = Depends(get_config),
) -> None:
    """Shared-token check for manual triggers."""
    token = config.admin_token
    if not token:
        logger.error("Admin token is not configured")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server configuration error")

    if not x_admin_token or not secrets.compare_digest(x_admin_token, token):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def _refresh_response(outcome: RefreshOutcome, config: Config) -> JSONResponse:
    if isinstance(outcome, RefreshThrottled):
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=outcome.to_response(),
            headers={"Retry-After": str(outcome.retry_after)},
        )
    return JSONResponse(outcome.to_response(config.config.refresh.max_errors_in_response))


@router.get("/cron/refresh", dependencies=[Depends(require_cron_secret)])
async def cron_refresh(
    orchestrator: RefreshOrchestrator = Depends(get_orchestrator),
    config: Config = Depends(get_config),
) -> JSONResponse:
    """Scheduled refresh."""
    outcome = await orchestrator.refresh(RefreshTrigger.SCHEDULED)
    return _refresh_response(outcome, config)


@router.post("/refresh")
async def public_refresh(
    orchestrator: RefreshOrchestrator = Depends(get_orchestrator),
    config: Config = Depends(get_config),
) -> JSONResponse:
    """Refresh requested by a reader; subject to the cooldown."""
    outcome = await orchestrator.refresh(RefreshTrigger.PUBLIC)
    return _refresh_response(outcome, config)


@router.post("/admin/refresh", dependencies=[Depends(require_admin_token)])
async def admin_refresh(
    orchestrator: RefreshOrchestrator = Depends(get_orchestrator),
    config: Config = Depends(get_config),
) -> JSONResponse:
    """Manual refresh, never throttled."""
    outcome = await orchestrator.refresh(RefreshTrigger.MANUAL)
    return _refresh_response(outcome, config)


@router.post("/admin/translate", dependencies=[Depends(require_admin_token)])
async def admin_translate(
    limit: Optional[int] = None,
    orchestrator: RefreshOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Run one translation batch and wait for it."""
    translated = await orchestrator.translate_now(limit)
    return {"success": True, "translated": translated}


@router.get("/refresh/status")
def refresh_status(orchestrator: RefreshOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    """Last refresh outcome and seconds until the next automatic one is allowed."""
    state = orchestrator.read_state()
    last_refresh = None
    if state.last_refresh:
        last_refresh = pendulum.instance(state.last_refresh).in_timezone("UTC").to_iso8601_string()
    return {
        "lastRefresh": last_refresh,
        "status": state.status.value if state.status else None,
        "added": state.added,
        "total": state.total,
        "errorCount": state.error_count,
        "retryAfter": orchestrator.seconds_until_eligible(state),
        "running": orchestrator.is_running,
    }


@router.get("/admin/feeds/health", dependencies=[Depends(require_admin_token)])
def feeds_health(orchestrator: RefreshOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    """Stale and failing feeds."""
    report = evaluate_feed_health(orchestrator.storage.list_sources())
    return report.model_dump(mode="json")
