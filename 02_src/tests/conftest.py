"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fakes import BASE_URL, FakeBackend, FakeChannel, FakePaymentSheet, SocketFactory  # noqa: E402


@pytest_asyncio.fixture
async def store():
    """Create in-memory credential store for testing."""
    from nightvibe.storage import CredentialStore

    st = CredentialStore(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def alice():
    from nightvibe.models import User

    return User(id="u1", username="alice", email="alice@example.com")


@pytest.fixture
def bob():
    from nightvibe.models import User

    return User(id="u2", username="bob", email="bob@example.com")


@pytest_asyncio.fixture
async def authed_store(store, alice):
    """Store holding a logged-in session for alice."""
    from nightvibe.models import Session

    await store.save_session(Session(auth_token="tok-alice", user=alice))
    return store


@pytest.fixture
def backend():
    """Fake backend with two chats between alice and bob."""
    return FakeBackend()


@pytest_asyncio.fixture
async def api(backend, authed_store):
    """REST client wired to the fake backend."""
    from nightvibe.rest import ApiClient

    client = ApiClient(
        BASE_URL, authed_store, transport=httpx.ASGITransport(app=backend.app)
    )
    yield client
    await client.aclose()


@pytest.fixture
def chat_service(api):
    from nightvibe.rest import ChatService

    return ChatService(api)


@pytest.fixture
def payment_service(api):
    from nightvibe.rest import PaymentService

    return PaymentService(api)


@pytest.fixture
def fake_channel():
    return FakeChannel()


@pytest.fixture
def socket_factory():
    return SocketFactory()


@pytest.fixture
def payment_sheet():
    return FakePaymentSheet()
