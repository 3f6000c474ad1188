"""Storefront popup widget model."""

from privacy_popup.widget.popup import (
    AcceptanceFlag,
    FlagStorage,
    MemoryFlagStorage,
    PopupState,
    PopupWidget,
    render_config,
)

__all__ = [
    "AcceptanceFlag",
    "FlagStorage",
    "MemoryFlagStorage",
    "PopupState",
    "PopupWidget",
    "render_config",
]
