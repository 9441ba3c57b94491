# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Registration, profile and leaderboard endpoint tests."""

from httpx import AsyncClient
from sqlalchemy import select

from auction_server.config import settings
from auction_server.models import User

REGISTER = "/api/v1/user/register"
UPDATE = "/api/v1/user/me/update"

BIDDER = {
    "user_name": "bob",
    "email": "bob@x.com",
    "password": "secret123",
    "phone": "555-0101",
    "address": "2 Side St",
    "role": "Bidder",
}


def png(name: str = "me.png") -> dict:
    return {"profile_image": (name, b"\x89PNG\r\n\x1a\nfake", "image/png")}


async def test_register_signs_in(client: AsyncClient, session_maker, image_store):
    r = await client.post(REGISTER, data=BIDDER, files=png())
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "User Registered."
    assert data["user"]["email"] == "bob@x.com"
    assert data["user"]["role"] == "Bidder"
    assert data["user"]["profile_image"] == {
        "public_id": "AUCTION_PLATFORM_USERS/img1",
        "url": "https://img.test/AUCTION_PLATFORM_USERS/img1.png",
    }
    assert settings.cookie_name in r.cookies
    assert image_store.uploaded == ["me.png"]

    async with session_maker() as session:
        user = (await session.execute(select(User).where(User.email == "bob@x.com"))).scalar_one()
    assert user.password_hash != "secret123"
    assert user.profile_image_public_id == "AUCTION_PLATFORM_USERS/img1"


async def test_register_requires_profile_image(client: AsyncClient, image_store):
    r = await client.post(REGISTER, data=BIDDER)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Profile Image Required."}
    assert image_store.uploaded == []


async def test_register_rejects_unsupported_image_format(client: AsyncClient, image_store):
    for name, content_type in [("me.gif", "image/gif"), ("me.txt", "text/plain")]:
        r = await client.post(REGISTER, data=BIDDER, files={"profile_image": (name, b"data", content_type)})
        assert r.status_code == 400
        assert r.json()["message"] == "File format not supported."

    for name, content_type in [("a.jpg", "image/jpeg"), ("b.webp", "image/webp")]:
        email = f"{name}@x.com"
        r = await client.post(
            REGISTER, data={**BIDDER, "email": email}, files={"profile_image": (name, b"data", content_type)}
        )
        assert r.status_code == 201
    assert image_store.uploaded == ["a.jpg", "b.webp"]


async def test_register_rejects_incomplete_and_duplicate(client: AsyncClient, image_store):
    r = await client.post(REGISTER, data={**BIDDER, "phone": ""}, files=png())
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Please fill full form."}

    assert (await client.post(REGISTER, data=BIDDER, files=png())).status_code == 201
    dup = await client.post(REGISTER, data=BIDDER, files=png())
    assert dup.status_code == 400
    assert dup.json()["message"] == "User already registered."
    assert len(image_store.uploaded) == 1


async def test_register_auctioneer_needs_payout_details(client: AsyncClient, image_store):
    auctioneer = {**BIDDER, "email": "seller@x.com", "role": "Auctioneer"}
    r = await client.post(REGISTER, data=auctioneer, files=png())
    assert r.status_code == 400
    assert r.json()["message"] == "Please provide your full bank details."

    auctioneer.update(bank_account_number="123", bank_account_name="Seller", bank_name="Bank")
    r = await client.post(REGISTER, data=auctioneer, files=png())
    assert r.json()["message"] == "Please provide your razorpay account ID."

    auctioneer["razorpay_account_id"] = "acc_1"
    r = await client.post(REGISTER, data=auctioneer, files=png())
    assert r.json()["message"] == "Please provide your paypal email."

    auctioneer["paypal_email"] = "seller@paypal.test"
    r = await client.post(REGISTER, data=auctioneer, files=png())
    assert r.status_code == 201
    assert r.json()["user"]["payment_methods"]["razorpay_account_id"] == "acc_1"


async def test_register_unknown_role(client: AsyncClient, image_store):
    r = await client.post(REGISTER, data={**BIDDER, "role": "Wizard"}, files=png())
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid role specified."


async def test_update_profile_keeps_omitted_fields(client: AsyncClient, login_as, image_store):
    await login_as("a@x.com", bank_name="Old Bank", paypal_email="a@paypal.test")

    r = await client.put(UPDATE, data={"phone": "555-9999", "bank_name": "New Bank"})
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["phone"] == "555-9999"
    assert user["address"] == "1 Main St"
    assert user["payment_methods"]["bank_name"] == "New Bank"
    assert user["payment_methods"]["paypal_email"] == "a@paypal.test"
    assert image_store.uploaded == []


async def test_update_profile_replaces_image(client: AsyncClient, login_as, image_store):
    await login_as(
        "a@x.com",
        profile_image_public_id="AUCTION_PLATFORM_USERS/old",
        profile_image_url="https://img.test/old.png",
    )

    r = await client.put(UPDATE, data={"address": "9 New Rd"}, files=png("new.png"))
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["address"] == "9 New Rd"
    assert user["profile_image"]["public_id"] == "AUCTION_PLATFORM_USERS/img1"
    assert image_store.uploaded == ["new.png"]
    assert image_store.destroyed == ["AUCTION_PLATFORM_USERS/old"]


async def test_update_profile_rejects_bad_image(client: AsyncClient, login_as, image_store):
    await login_as("a@x.com", profile_image_public_id="keep", profile_image_url="https://img.test/keep.png")
    r = await client.put(UPDATE, files={"profile_image": ("x.bmp", b"BM", "image/bmp")})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid file format. Only PNG, JPEG, and WebP are allowed."
    assert image_store.uploaded == []
    assert image_store.destroyed == []
    me = (await client.get("/api/v1/user/me")).json()["user"]
    assert me["profile_image"]["public_id"] == "keep"


async def test_update_profile_email_taken(client: AsyncClient, make_user, login_as, image_store):
    await make_user(email="taken@x.com")
    await login_as("a@x.com")
    r = await client.put(UPDATE, data={"email": "taken@x.com"})
    assert r.status_code == 400
    assert r.json()["message"] == "Email already in use."


async def test_delete_account(client: AsyncClient, login_as, session_maker, image_store):
    await login_as("a@x.com", profile_image_public_id="AUCTION_PLATFORM_USERS/a", profile_image_url="https://img.test/a.png")
    r = await client.delete("/api/v1/user/me")
    assert r.status_code == 200
    assert r.json()["message"] == "User deleted successfully."
    assert image_store.destroyed == ["AUCTION_PLATFORM_USERS/a"]

    async with session_maker() as session:
        assert (await session.execute(select(User).where(User.email == "a@x.com"))).scalar_one_or_none() is None
    assert (await client.get("/api/v1/user/me")).status_code == 401


async def test_delete_account_without_image(client: AsyncClient, login_as, image_store):
    await login_as("a@x.com")
    assert (await client.delete("/api/v1/user/me")).status_code == 200
    assert image_store.destroyed == []


async def test_leaderboard_orders_by_money_spent(client: AsyncClient, make_user):
    await make_user(email="zero@x.com", money_spent=0)
    await make_user(email="small@x.com", money_spent=50)
    await make_user(email="big@x.com", money_spent=200, profile_image_url="https://img.test/big.png")

    r = await client.get("/api/v1/user/leaderboard")
    assert r.status_code == 200
    board = r.json()["leaderboard"]
    assert [entry["user_name"] for entry in board] == ["big", "small"]
    assert board[0]["profile_image_url"] == "https://img.test/big.png"
    assert "email" not in board[0]
