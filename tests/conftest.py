"""Pytest configuration and fixtures for the Privacy Popup API test suite.

Provides:
- Required environment for Settings (set before the app is imported)
- In-memory and fakeredis storage backends
- Disabled rate limiting
- Async test clients with the storage backend overridden
- Installed-shop, session-token and signing helpers for Shopify flows
"""

import os

os.environ.setdefault("SHOPIFY_API_KEY", "test-shopify-api-key")
os.environ.setdefault("SHOPIFY_API_SECRET", "test-shopify-api-secret")
os.environ.setdefault("HOST", "https://popup.example.com")
os.environ.setdefault("SESSION_SECRET", "test-session-secret-0123456789")
os.environ.pop("REDIS_URL", None)

import time  # noqa: E402
from collections.abc import AsyncGenerator, Callable, Generator  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import fakeredis.aioredis  # noqa: E402
import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from privacy_popup.core.config import settings  # noqa: E402
from privacy_popup.core.deps import get_backend, get_settings_store  # noqa: E402
from privacy_popup.core.rate_limit import limiter  # noqa: E402
from privacy_popup.integrations.shopify.signatures import canonical_query, sign  # noqa: E402
from privacy_popup.main import app  # noqa: E402
from privacy_popup.schemas.session import ShopSession  # noqa: E402
from privacy_popup.stores.backends import MemoryBackend, RedisBackend  # noqa: E402
from privacy_popup.stores.oauth_state import OAuthStateStore  # noqa: E402
from privacy_popup.stores.sessions import KeyValueSessionStore  # noqa: E402
from privacy_popup.stores.settings import SettingsStore  # noqa: E402

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SHOPIFY_TEST_API_KEY = settings.shopify_api_key
SHOPIFY_TEST_API_SECRET = settings.shopify_api_secret
SHOPIFY_TEST_SHOP = "test-store.myshopify.com"
SHOPIFY_TEST_ACCESS_TOKEN = "shpat_test_access_token_123"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
def backend() -> MemoryBackend:
    """Fresh in-memory backend per test."""
    return MemoryBackend()


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Provide a fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def redis_backend(fake_redis: fakeredis.aioredis.FakeRedis) -> RedisBackend:
    return RedisBackend(fake_redis)


@pytest.fixture
def session_store(backend: MemoryBackend) -> KeyValueSessionStore:
    return KeyValueSessionStore(backend)


@pytest.fixture
def settings_store(backend: MemoryBackend) -> SettingsStore:
    """The same SettingsStore instance the app resolves for ``backend``."""
    return get_settings_store(backend)


@pytest.fixture
def oauth_state_store(backend: MemoryBackend) -> OAuthStateStore:
    return OAuthStateStore(backend)


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(backend: MemoryBackend) -> AsyncGenerator[AsyncClient, None]:
    """Async test client whose storage backend is the per-test ``backend``."""
    app.dependency_overrides[get_backend] = lambda: backend

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="https://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Installed shops and session tokens
# ---------------------------------------------------------------------------


@pytest.fixture
def installed_shop(
    session_store: KeyValueSessionStore,
) -> Callable[..., Any]:
    """Factory that stores a session for a shop, as a completed install would."""

    async def _install(
        shop: str = SHOPIFY_TEST_SHOP,
        access_token: str = SHOPIFY_TEST_ACCESS_TOKEN,
        **extra: Any,
    ) -> ShopSession:
        session = ShopSession(shop=shop, access_token=access_token, scope=settings.scopes, **extra)
        await session_store.put(session)
        return session

    return _install


@pytest.fixture
def session_token() -> Callable[..., str]:
    """Mint an App Bridge style session token for a shop.

    Usage:
        token = session_token("my-store.myshopify.com")
        headers = {"Authorization": f"Bearer {token}"}
    """

    def _mint(
        shop: str = SHOPIFY_TEST_SHOP,
        *,
        expires_in: int = 60,
        audience: str = SHOPIFY_TEST_API_KEY,
        secret: str = SHOPIFY_TEST_API_SECRET,
    ) -> str:
        now = int(time.time())
        claims = {
            "iss": f"https://{shop}/admin",
            "dest": f"https://{shop}",
            "aud": audience,
            "sub": "42",
            "exp": now + expires_in,
            "nbf": now - 5,
            "iat": now - 5,
            "jti": "test-jti",
        }
        return jwt.encode(claims, secret, algorithm="HS256")

    return _mint


@pytest.fixture
def auth_headers(session_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {session_token()}"}


# ---------------------------------------------------------------------------
# Shopify signing helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def shopify_oauth_hmac() -> Callable[[dict[str, str]], str]:
    """Sign OAuth callback params the way the verifier expects.

    Usage:
        params = {"code": "abc", "shop": "store.myshopify.com", "state": "nonce123"}
        params["hmac"] = shopify_oauth_hmac(params)
    """

    def _compute(params: dict[str, str]) -> str:
        return sign(canonical_query(params), SHOPIFY_TEST_API_SECRET)

    return _compute


@pytest.fixture
def shopify_webhook_headers() -> Callable[..., dict[str, str]]:
    """Generate complete Shopify webhook headers for a given body and shop."""

    def _headers(body: bytes, shop: str = SHOPIFY_TEST_SHOP) -> dict[str, str]:
        return {
            "X-Shopify-Hmac-Sha256": sign(body, SHOPIFY_TEST_API_SECRET),
            "X-Shopify-Shop-Domain": shop,
            "X-Shopify-Topic": "app/uninstalled",
            "Content-Type": "application/json",
        }

    return _headers


# ---------------------------------------------------------------------------
# Shopify HTTP mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_shopify_token_exchange() -> Generator[AsyncMock, None, None]:
    """Mock the Shopify OAuth token exchange HTTP call.

    Patches httpx.AsyncClient in oauth.py to return an access token + scopes.
    """
    with patch("privacy_popup.integrations.shopify.oauth.httpx.AsyncClient") as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client

        mock_response = MagicMock()
        mock_response.json.return_value = {
            "access_token": SHOPIFY_TEST_ACCESS_TOKEN,
            "scope": "write_themes,read_themes",
        }
        mock_response.raise_for_status = MagicMock()
        mock_client.post.return_value = mock_response

        yield mock_client


@pytest.fixture
def mock_shopify_client() -> Generator[MagicMock, None, None]:
    """Mock ShopifyClient in the OAuth service to avoid webhook registration calls."""
    with patch("privacy_popup.services.oauth_service.ShopifyClient") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value = mock_instance
        mock_instance.register_uninstall_webhook = AsyncMock(return_value=True)
        yield mock_instance


@pytest.fixture
def mock_shopify_http() -> Generator[AsyncMock, None, None]:
    """Mock httpx.AsyncClient for ShopifyClient unit tests."""
    with patch("privacy_popup.integrations.shopify.client.httpx.AsyncClient") as mock_class:
        mock_client = AsyncMock()
        mock_class.return_value.__aenter__.return_value = mock_client

        mock_get_response = MagicMock()
        mock_get_response.json.return_value = {"shop": {"id": 1, "name": "Test Store"}}
        mock_get_response.raise_for_status = MagicMock()

        mock_post_response = MagicMock()
        mock_post_response.json.return_value = {"webhook": {"id": 1}}
        mock_post_response.is_success = True

        mock_client.get.return_value = mock_get_response
        mock_client.post.return_value = mock_post_response

        yield mock_client


@pytest.fixture
def valid_settings_payload() -> dict[str, Any]:
    """A complete settings record as the admin UI posts it."""
    return {
        "popup_enabled": True,
        "popup_title": "We value your privacy",
        "popup_text": "This store uses cookies for analytics.",
        "accept_text": "Sounds good",
        "decline_text": "No thanks",
        "show_decline": True,
        "privacy_policy_url": "https://test-store.myshopify.com/policies/privacy-policy",
        "policy_link_text": "Read the policy",
        "position": "center",
        "delay_seconds": 5,
        "background_color": "#000000",
        "text_color": "#fff",
        "accept_button_color": "#ff6600",
    }
