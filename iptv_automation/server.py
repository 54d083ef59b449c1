"""
Automation HTTP service

FastAPI application exposing health, lookup, bulk lookup, create and renew.
Routes are served both at the root and under /api.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings
from .exceptions import AutomationError, ConfigurationError
from .models.panel import PanelCredentials
from .models.provisioning import CreateLineRequest, RenewLineRequest
from .resources import AutomationResources

logger = logging.getLogger(__name__)


class PanelTarget(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    panel_url: str = Field(alias="panelUrl", min_length=1)
    panel_user: str = Field(alias="panelUser", min_length=1)
    panel_pass: str = Field(alias="panelPass", min_length=1)
    plan_months: int = Field(default=1, alias="planMonths", ge=0)

    @property
    def panel(self) -> PanelCredentials:
        return PanelCredentials(self.panel_url, self.panel_user, self.panel_pass)


class CreatePayload(PanelTarget):
    customer_name: str = Field(alias="customerName", min_length=1)
    customer_email: Optional[str] = Field(default=None, alias="customerEmail")


class RenewPayload(PanelTarget):
    iptv_username: str = Field(alias="iptvUsername", min_length=1)


class BulkLookupPayload(BaseModel):
    usernames: Optional[list[str]] = None


def get_resources(request: Request) -> AutomationResources:
    return request.app.state.resources


router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/lookup/{username}")
async def lookup(username: str, resources: AutomationResources = Depends(get_resources)):
    try:
        record = await resources.lookup_client.lookup(username)
    except AutomationError as e:
        logger.error(f"[LOOKUP] Error: {e}")
        resources.session_manager.invalidate()
        return JSONResponse(status_code=500, content={"error": e.message})

    if record is None:
        return JSONResponse(status_code=404, content={"error": "User not found"})
    return record.to_dict()


@router.post("/lookup-bulk")
async def lookup_bulk(payload: BulkLookupPayload, resources: AutomationResources = Depends(get_resources)):
    if payload.usernames is None:
        return JSONResponse(status_code=400, content={"error": "Provide usernames array"})

    results = await resources.lookup_client.bulk_lookup(payload.usernames)
    return {
        username: entry.to_dict() if hasattr(entry, "to_dict") else entry
        for username, entry in results.items()
    }


@router.post("/create")
async def create(payload: CreatePayload, resources: AutomationResources = Depends(get_resources)):
    request = CreateLineRequest(
        customer_name=payload.customer_name,
        customer_email=payload.customer_email or None,
        panel=payload.panel,
        plan_months=payload.plan_months,
    )
    result = await resources.provisioning.create_line(request)

    if not result.success:
        content = {"error": result.error, "username": result.username}
        if result.alternate_username:
            content["alternateUsername"] = result.alternate_username
        return JSONResponse(status_code=500, content=content)

    return {
        "success": True,
        "username": result.username,
        "password": result.password,
        "expiresIn": f"{result.plan_months} month(s)",
        "emailSent": result.email_sent,
        "successIndicators": result.success_indicators,
    }


@router.post("/renew")
async def renew(payload: RenewPayload, resources: AutomationResources = Depends(get_resources)):
    request = RenewLineRequest(
        username=payload.iptv_username,
        panel=payload.panel,
        plan_months=payload.plan_months,
    )
    result = await resources.provisioning.renew_line(request)

    if not result.success:
        return JSONResponse(status_code=500, content={"error": result.error, "username": result.username})

    return {
        "success": True,
        "username": result.username,
        "monthsAdded": result.plan_months,
        "successIndicators": result.success_indicators,
    }


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Missing required parameters", "fields": fields})


async def _configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=400, content={"error": exc.message, "fields": exc.fields})


async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(settings: Optional[Settings] = None, resources: Optional[AutomationResources] = None) -> FastAPI:
    """Build the application; pass `resources` to inject collaborators"""
    if resources is None:
        resources = AutomationResources.from_settings(settings or Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Panel automation running on port {resources.settings.port}")
        yield
        await resources.close()

    app = FastAPI(title="IPTV Panel Automation", lifespan=lifespan)
    app.state.resources = resources
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ConfigurationError, _configuration_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
    app.include_router(router)
    app.include_router(router, prefix="/api")
    return app
