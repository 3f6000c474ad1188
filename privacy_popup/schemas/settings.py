"""Pydantic schemas for the popup settings record."""

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, ConfigDict, Field

from privacy_popup.schemas.common import BaseSchema

HEX_COLOR_PATTERN = r"^#(?:[0-9A-Fa-f]{3}){1,2}$"


class PopupPosition(StrEnum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class PopupSettings(BaseSchema):
    """Complete popup configuration for one shop.

    Every field except ``privacy_policy_url`` is required: saves replace the
    whole record, so a payload missing a field is rejected rather than merged.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        extra="forbid",
    )

    popup_enabled: bool
    popup_title: str = Field(..., max_length=200)
    popup_text: str = Field(..., max_length=2000)
    accept_text: str = Field(..., max_length=100)
    decline_text: str = Field(..., max_length=100)
    show_decline: bool
    privacy_policy_url: str | None = Field(default=None, max_length=2048)
    policy_link_text: str = Field(..., max_length=100)
    position: PopupPosition
    delay_seconds: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("delay_seconds", "delay"),
        description="Seconds before the popup is shown",
    )
    background_color: str = Field(..., pattern=HEX_COLOR_PATTERN)
    text_color: str = Field(..., pattern=HEX_COLOR_PATTERN)
    accept_button_color: str = Field(..., pattern=HEX_COLOR_PATTERN)


class SaveSettingsResponse(BaseSchema):
    """Response for a successful settings save."""

    success: bool = True
    settings: PopupSettings


class StorefrontPopupConfig(BaseSchema):
    """What the theme extension needs to render the popup."""

    enabled: bool
    delay_seconds: int
    position_class: str
    css_variables: dict[str, str]
    content: dict[str, Any]


DEFAULT_POPUP_SETTINGS = PopupSettings(
    popup_enabled=True,
    popup_title="Privacy Notice",
    popup_text="We use cookies to improve your experience on our site.",
    accept_text="Accept",
    decline_text="Decline",
    show_decline=False,
    privacy_policy_url=None,
    policy_link_text="Privacy Policy",
    position=PopupPosition.BOTTOM,
    delay_seconds=2,
    background_color="#ffffff",
    text_color="#333333",
    accept_button_color="#007cba",
)
