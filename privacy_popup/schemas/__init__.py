"""Pydantic schemas for request/response validation."""

from privacy_popup.schemas.common import ErrorResponse, HealthResponse
from privacy_popup.schemas.session import ShopSession
from privacy_popup.schemas.settings import (
    DEFAULT_POPUP_SETTINGS,
    PopupPosition,
    PopupSettings,
    SaveSettingsResponse,
    StorefrontPopupConfig,
)

__all__ = [
    "DEFAULT_POPUP_SETTINGS",
    "ErrorResponse",
    "HealthResponse",
    "PopupPosition",
    "PopupSettings",
    "SaveSettingsResponse",
    "ShopSession",
    "StorefrontPopupConfig",
]
