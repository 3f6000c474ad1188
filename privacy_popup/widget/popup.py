"""Storefront popup behaviour as an explicit state machine.

The theme extension script follows this model: every stimulus (page load,
delay timer, accept, decline, overlay click) is a method call and the widget
is always in exactly one of HIDDEN, VISIBLE or DISMISSED. Notifications are
queued in ``events`` for the host page to dispatch.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol

from privacy_popup.schemas.settings import PopupSettings, StorefrontPopupConfig

logger = logging.getLogger(__name__)

STORAGE_KEY = "privacy_popup_accepted"
STORAGE_EXPIRY = timedelta(days=365)

ACCEPTED_EVENT = "privacy_popup_accepted"
DECLINED_EVENT = "privacy_popup_declined"


class PopupState(StrEnum):
    HIDDEN = "hidden"
    VISIBLE = "visible"
    DISMISSED = "dismissed"


class FlagStorage(Protocol):
    """The subset of the browser's localStorage the widget uses."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryFlagStorage:
    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass(frozen=True)
class AcceptanceFlag:
    value: bool
    expiry: datetime

    @classmethod
    def accepted_at(cls, now: datetime) -> "AcceptanceFlag":
        return cls(value=True, expiry=now + STORAGE_EXPIRY)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expiry

    def dumps(self) -> str:
        # Same shape the storefront script writes: the string "true", epoch milliseconds
        value = "true" if self.value else "false"
        return json.dumps({"value": value, "expiry": int(self.expiry.timestamp() * 1000)})

    @classmethod
    def loads(cls, raw: str) -> "AcceptanceFlag":
        item = json.loads(raw)
        expiry = datetime.fromtimestamp(int(item["expiry"]) / 1000, tz=UTC)
        return cls(value=item["value"] in (True, "true"), expiry=expiry)


def read_flag(storage: FlagStorage, now: datetime) -> bool:
    """True if the visitor accepted and the flag hasn't expired. Expired flags are removed."""
    raw = storage.get_item(STORAGE_KEY)
    if raw is None:
        return False
    try:
        flag = AcceptanceFlag.loads(raw)
    except (ValueError, KeyError, TypeError):
        logger.debug("Ignoring unreadable acceptance flag")
        return False
    if flag.is_expired(now):
        storage.remove_item(STORAGE_KEY)
        return False
    return flag.value


def write_flag(storage: FlagStorage, now: datetime) -> AcceptanceFlag:
    flag = AcceptanceFlag.accepted_at(now)
    storage.set_item(STORAGE_KEY, flag.dumps())
    return flag


@dataclass
class PopupWidget:
    settings: PopupSettings
    storage: FlagStorage
    state: PopupState = PopupState.HIDDEN
    show_at: datetime | None = None
    events: list[str] = field(default_factory=list)

    def load(self, now: datetime) -> PopupState:
        """Page load. Decides whether the popup is scheduled at all."""
        if not self.settings.popup_enabled or read_flag(self.storage, now):
            self.state = PopupState.DISMISSED
            return self.state
        self.state = PopupState.HIDDEN
        self.show_at = now + timedelta(seconds=self.settings.delay_seconds)
        return self.state

    def timer_fired(self) -> PopupState:
        if self.state is PopupState.HIDDEN and self.show_at is not None:
            self.state = PopupState.VISIBLE
        return self.state

    def accept(self, now: datetime) -> PopupState:
        if self.state is PopupState.VISIBLE:
            write_flag(self.storage, now)
            self.state = PopupState.DISMISSED
            self.events.append(ACCEPTED_EVENT)
        return self.state

    def decline(self) -> PopupState:
        if self.state is PopupState.VISIBLE:
            self.state = PopupState.DISMISSED
            self.events.append(DECLINED_EVENT)
        return self.state

    def click_overlay(self) -> PopupState:
        """Click outside the content: hide for this page view only."""
        if self.state is PopupState.VISIBLE:
            self.state = PopupState.DISMISSED
        return self.state


def render_config(settings: PopupSettings) -> StorefrontPopupConfig:
    """Translate stored settings into what the theme extension applies to the DOM."""
    return StorefrontPopupConfig(
        enabled=settings.popup_enabled,
        delay_seconds=settings.delay_seconds,
        position_class=f"position-{settings.position.value}",
        css_variables={
            "--popup-bg-color": settings.background_color,
            "--popup-text-color": settings.text_color,
            "--popup-accept-color": settings.accept_button_color,
        },
        content={
            "title": settings.popup_title,
            "text": settings.popup_text,
            "accept_text": settings.accept_text,
            "decline_text": settings.decline_text if settings.show_decline else None,
            "privacy_policy_url": settings.privacy_policy_url,
            "policy_link_text": settings.policy_link_text,
            "storage_key": STORAGE_KEY,
            "storage_expiry_days": STORAGE_EXPIRY.days,
        },
    )
