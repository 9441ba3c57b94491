# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Razorpay integration: order creation and payment signature checks."""

import hashlib
import hmac
import logging
import time
from typing import Any

import httpx

from auction_server.config import settings
from auction_server.errors import PaymentGatewayError

logger = logging.getLogger(__name__)

CURRENCY = "INR"


def to_subunits(amount: float | int | str) -> int:
    """Rupees to paise, which is what Razorpay expects."""
    return int(round(float(amount) * 100))


async def create_order(amount: float | int | str, client: httpx.AsyncClient | None = None) -> dict[str, Any]:
    """Create a Razorpay order for ``amount`` rupees. Raises PaymentGatewayError on failure."""
    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        raise PaymentGatewayError("Razorpay is not configured.")
    payload = {
        "amount": to_subunits(amount),
        "currency": CURRENCY,
        "receipt": f"receipt_{int(time.time() * 1000)}",
    }
    auth = (settings.razorpay_key_id, settings.razorpay_key_secret)
    url = f"{settings.razorpay_api_url.rstrip('/')}/orders"
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10.0) as own_client:
                r = await own_client.post(url, json=payload, auth=auth)
        else:
            r = await client.post(url, json=payload, auth=auth)
    except httpx.HTTPError as e:
        logger.warning("Razorpay order request failed: %s", e)
        raise PaymentGatewayError(str(e) or "Payment gateway unreachable.") from e

    if r.status_code >= 400:
        message = "Payment gateway request failed."
        try:
            message = r.json().get("error", {}).get("description") or message
        except ValueError:
            pass
        logger.warning("Razorpay rejected order (%s): %s", r.status_code, message)
        raise PaymentGatewayError(message)
    return r.json()


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
    """True when ``signature`` is the gateway's HMAC for this order/payment pair."""
    if not settings.razorpay_key_secret:
        return False
    expected = expected_signature(order_id, payment_id, settings.razorpay_key_secret)
    return hmac.compare_digest(expected.encode(), signature.encode())
