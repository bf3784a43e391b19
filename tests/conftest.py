"""공용 픽스처: 임시 SQLite DB, 이미지 디렉토리, 세션 저장소, API 클라이언트"""

import io
import os
import tempfile
from datetime import datetime, timedelta, timezone

# 설정 모듈이 import 되기 전에 테스트용 환경 변수를 지정
_TEST_ROOT = tempfile.mkdtemp(prefix="snapshare-tests-")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db")
os.environ.setdefault("IMAGE_DIR", os.path.join(_TEST_ROOT, "images"))

import pytest
import pytest_asyncio
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from snapshare.core.config import UploadConfig
from snapshare.core.database import get_db_session, init_db
from snapshare.dependencies import get_image_storage, get_session_store
from snapshare.jwt.session_store import SessionStore
from snapshare.main import app
from snapshare.services.auth_service import AuthService
from snapshare.services.post_service import PostService
from snapshare.services.storage_service import ImageStorage

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64
DEFAULT_PASSWORD = "password123"


class FakeClock:
    """세션 만료 테스트용으로 시각을 직접 조정하는 시계"""

    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_upload(filename: str = "photo.png", content: bytes = PNG_BYTES) -> UploadFile:
    """메모리 상의 UploadFile 생성"""
    return UploadFile(file=io.BytesIO(content), filename=filename)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """테스트마다 새로 만드는 SQLite DB (테이블 생성 포함)"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    """서비스 테스트에서 직접 사용하는 DB 세션"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def image_dir(tmp_path):
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def storage(image_dir) -> ImageStorage:
    return ImageStorage(str(image_dir), "/images", UploadConfig())


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def make_user(db, store):
    """AuthService로 사용자를 가입시키는 팩토리"""
    counter = {"n": 0}

    async def _make(email=None, password=DEFAULT_PASSWORD, **kwargs):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return await AuthService(db, store).register(email, password, **kwargs)

    return _make


@pytest.fixture
def make_post(db, storage):
    """PostService로 포스트를 생성하는 팩토리"""

    async def _make(user_id, title="t", description="d", tags=("x",), image=None):
        return await PostService(db, storage).create_post(
            user_id, title, description, list(tags), image
        )

    return _make


@pytest_asyncio.fixture
async def client(session_factory, storage, store):
    """테스트 DB/저장소/세션 저장소를 주입한 HTTP 클라이언트"""

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_image_storage] = lambda: storage
    app.dependency_overrides[get_session_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """API로 (필요 시) 가입 후 로그인하고 (헤더, user_id) 반환"""

    async def _login(email, password=DEFAULT_PASSWORD, register=True):
        if register:
            res = await client.post(
                "/api/auth/register", json={"email": email, "password": password}
            )
            assert res.status_code == 201, res.text
        res = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        body = res.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]["id"]

    return _login
