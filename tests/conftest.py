# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. HTTP tests run against an in-memory SQLite database."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auction_server.auth import hash_password
from auction_server.database import get_db
from auction_server.main import app
from auction_server.models import Base, User
from auction_server.routers.user import get_image_store
from auction_server.services.images import HostedImage


@pytest.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_maker):
    """Factory that inserts a user with a bcrypt-hashed password."""

    async def _make(email: str = "a@x.com", password: str = "goodpw", role: str = "Bidder", **fields) -> User:
        async with session_maker() as session:
            user = User(
                user_name=fields.pop("user_name", email.split("@")[0]),
                email=email,
                password_hash=hash_password(password),
                phone=fields.pop("phone", "555-0100"),
                address=fields.pop("address", "1 Main St"),
                role=role,
                **fields,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
def login_as(client: AsyncClient, make_user):
    """Create a user and sign the client in with the password login."""

    async def _login(email: str, password: str = "goodpw", role: str = "Bidder", **fields) -> User:
        user = await make_user(email=email, password=password, role=role, **fields)
        r = await client.post("/api/v1/user/login", json={"email": email, "password": password})
        assert r.status_code == 200
        return user

    return _login


class FakeImageStore:
    """Records uploads and deletions instead of calling Cloudinary."""

    def __init__(self) -> None:
        self.uploaded: list[str] = []
        self.destroyed: list[str] = []

    async def upload(self, image) -> HostedImage:
        public_id = f"AUCTION_PLATFORM_USERS/img{len(self.uploaded) + 1}"
        self.uploaded.append(image.filename)
        return HostedImage(public_id=public_id, url=f"https://img.test/{public_id}.png")

    async def destroy(self, public_id: str) -> None:
        self.destroyed.append(public_id)


@pytest.fixture
def image_store(client) -> FakeImageStore:
    store = FakeImageStore()
    app.dependency_overrides[get_image_store] = lambda: store
    return store
