"""Popup settings endpoints for the embedded admin (session required)."""

import logging
from typing import Any

from fastapi import APIRouter, Body

from privacy_popup.core.auth import CurrentSession
from privacy_popup.core.deps import SettingsRepo
from privacy_popup.schemas.common import ErrorResponse
from privacy_popup.schemas.settings import PopupSettings, SaveSettingsResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=PopupSettings,
    summary="Get popup settings",
    description="Stored settings for the current shop, or defaults before the first save.",
)
async def get_settings(session: CurrentSession, store: SettingsRepo) -> PopupSettings:
    return await store.get(session.shop)


@router.post(
    "",
    response_model=SaveSettingsResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Save popup settings",
    description="Replace the current shop's settings. The complete record is required.",
)
async def save_settings(
    session: CurrentSession,
    store: SettingsRepo,
    payload: dict[str, Any] = Body(...),
) -> SaveSettingsResponse:
    """Validate and store the full settings record."""
    saved = await store.set(session.shop, payload)
    return SaveSettingsResponse(success=True, settings=saved)
