# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from auction_server.models.base import Base
from auction_server.models.user import Role, User
from auction_server.models.auction import Auction

__all__ = [
    "Base",
    "Role",
    "User",
    "Auction",
]
