"""Storage abstractions for sessions, settings and OAuth state."""

from privacy_popup.stores.backends import KeyValueBackend, MemoryBackend, RedisBackend
from privacy_popup.stores.oauth_state import OAuthStateStore
from privacy_popup.stores.sessions import KeyValueSessionStore, SessionStore
from privacy_popup.stores.settings import SettingsStore

__all__ = [
    "KeyValueBackend",
    "KeyValueSessionStore",
    "MemoryBackend",
    "OAuthStateStore",
    "RedisBackend",
    "SessionStore",
    "SettingsStore",
]
