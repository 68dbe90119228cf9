import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from app.domain.chat import sockets as chat_sockets
from app.domain.chat.repo import InMemoryChatRepository
from app.domain.chat.service import ChatService, get_chat_service
from app.domain.matching.service import DiscoveryService, get_discovery_service
from app.domain.profiles.models import Profile
from app.domain.profiles.repo import InMemoryProfileRepository
from app.domain.profiles.service import ProfileService, get_profile_service
from app.domain.social import sockets as social_sockets
from app.domain.social.repo import InMemorySocialRepository
from app.domain.social.service import SocialService, get_social_service
from app.infra import postgres
from app.main import app
from app.settings import settings


if hasattr(asyncio, "WindowsSelectorEventLoopPolicy"):
	asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from app.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""API tests authenticate via the X-User-Id header, which is only accepted in dev."""
	original_env = settings.environment
	settings.environment = "dev"
	try:
		yield
	finally:
		settings.environment = original_env


@pytest.fixture(autouse=True)
def detach_socket_namespaces(monkeypatch):
	monkeypatch.setattr(social_sockets, "_namespace", None)
	monkeypatch.setattr(chat_sockets, "_namespace", None)


@pytest.fixture
def profile_repo():
	return InMemoryProfileRepository()


@pytest.fixture
def social_repo():
	return InMemorySocialRepository()


@pytest.fixture
def chat_repo():
	return InMemoryChatRepository()


@pytest.fixture
def make_profile(profile_repo):
	"""Store a profile in the in-memory repo; later calls are more recently updated."""
	counter = {"n": 0}
	base = datetime(2024, 9, 1, tzinfo=timezone.utc)

	def _make(full_name="Test Student", **fields):
		counter["n"] += 1
		fields.setdefault("id", str(uuid4()))
		fields.setdefault("updated_at", base + timedelta(minutes=counter["n"]))
		profile = Profile(full_name=full_name, **fields)
		profile_repo._profiles[profile.id] = profile
		return profile

	return _make


@pytest.fixture
def social_service(social_repo, profile_repo):
	return SocialService(social_repo, profile_repo)


@pytest.fixture
def chat_service(chat_repo, profile_repo):
	return ChatService(chat_repo, profile_repo)


@pytest.fixture
def wired_app(profile_repo, social_repo, chat_repo):
	app.dependency_overrides[get_profile_service] = lambda: ProfileService(profile_repo, social_repo)
	app.dependency_overrides[get_social_service] = lambda: SocialService(social_repo, profile_repo)
	app.dependency_overrides[get_discovery_service] = lambda: DiscoveryService(profile_repo, social_repo)
	app.dependency_overrides[get_chat_service] = lambda: ChatService(chat_repo, profile_repo)
	try:
		yield app
	finally:
		app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(wired_app):
	transport = ASGITransport(app=wired_app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client


@pytest.fixture
def as_user():
	def _headers(user_id) -> dict:
		return {"X-User-Id": str(user_id)}

	return _headers
