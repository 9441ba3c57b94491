# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Payment API routes - Razorpay orders and signature verification."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from auction_server.api.schemas import CreateOrderRequest, VerifyPaymentRequest
from auction_server.auth import get_current_user_id
from auction_server.database import get_db
from auction_server.models import Auction
from auction_server.services import payments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("/create-order")
async def create_payment_order(
    data: CreateOrderRequest,
    _user_id: int = Depends(get_current_user_id),
) -> dict:
    """Create a gateway order. ``amount`` is in rupees."""
    if not data.amount:
        raise HTTPException(status_code=400, detail="Amount is required")
    order = await payments.create_order(data.amount)
    return {"success": True, "order": order}


@router.post("/verify-payment")
async def verify_payment(
    data: VerifyPaymentRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Check the gateway signature and mark the auction paid."""
    authentic = payments.verify_signature(
        data.razorpay_order_id or "",
        data.razorpay_payment_id or "",
        data.razorpay_signature or "",
    )
    if not authentic:
        logger.warning("Payment signature mismatch for order %s (user %s)", data.razorpay_order_id, user_id)
        raise HTTPException(status_code=400, detail="Payment verification failed")

    if data.auction_id is not None:
        auction = await db.get(Auction, data.auction_id)
        if auction:
            auction.is_paid = True
            await db.commit()
    return {"success": True, "message": "Payment verified successfully"}
