from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest
from authlib.jose.rfc7517.jwk import JsonWebKey
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwt as jose_jwt

from ett_sdk.context import SDKContext
from ett_sdk.models.supplier import AdditionalData
from ett_sdk.utils.http import HttpExecutor, HTTPRequestError

# 32 bytes: an AES-256 vault key
SECRET_KEY = "0123456789abcdef0123456789abcdef"
TEST_KID = "test-key"

STAGING = AdditionalData(environment_id="env-dev", prod_env_id="env-prod")


def pytest_configure(config):
    """
    Loads a local .env for tests that read settings from the environment.
    """
    from dotenv import load_dotenv

    load_dotenv()


class FakeObjectStore:
    """Records update_object calls; set `fail` to make the next writes raise."""

    def __init__(self) -> None:
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail = False

    async def update_object(self, table_slug: str, data: dict[str, Any]) -> dict[str, Any]:
        if self.fail:
            raise HTTPRequestError('{"description": "object store down"}', 500, b'{"description": "object store down"}')
        self.updates.append((table_slug, data))
        return {"data": data}


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def notify(self, text: str) -> None:
        self.messages.append(text)


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_context(object_store, notifier) -> Callable[..., SDKContext]:
    """
    Factory for an SDKContext whose HTTP calls are answered by `handler`.
    Every request the handler sees is also appended to the returned context's `requests`.
    """

    def _factory(handler: Callable[[httpx.Request], httpx.Response] | None = None) -> SDKContext:
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if handler is None:
                return httpx.Response(500, text="unexpected request")
            return handler(request)

        context = SDKContext(
            http=HttpExecutor(httpx.MockTransport(_record)),
            object_store=object_store,
            notifier=notifier,
        )
        context.requests = requests  # type: ignore[attr-defined]
        return context

    return _factory


@pytest.fixture(scope="session")
def jwks_keys():
    """
    Generates RSA keys for signing and verifying test JWTs.
    Returns:
        tuple: (private_pem, public_pem, public_jwk_dict, untrusted_private_pem)
    """
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("utf-8")
    )
    public_jwk_dict = JsonWebKey.import_key(public_pem, {"kty": "RSA", "kid": TEST_KID}).as_dict()

    untrusted_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    untrusted_private_pem = untrusted_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")

    return private_pem, public_pem, public_jwk_dict, untrusted_private_pem


def create_test_jwt(private_pem: str, claims: dict[str, Any], expires_in: timedelta = timedelta(minutes=5)) -> str:
    """Helper to create an RS256-signed JWT for testing."""
    now = datetime.now(UTC)
    payload = {"iat": now, "exp": now + expires_in}
    payload.update(claims)
    return jose_jwt.encode(payload, private_pem, algorithm="RS256", headers={"kid": TEST_KID})
