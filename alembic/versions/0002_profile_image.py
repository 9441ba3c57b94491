# Copyright (C) 2024 Auction Platform Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
"""Add hosted profile image columns to users.

Revision ID: 0002_profile_image
Revises: 0001_users_auctions
Create Date: 2026-10-17

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002_profile_image"
down_revision: Union[str, None] = "0001_users_auctions"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("users", sa.Column("profile_image_public_id", sa.String(255), nullable=True))
    op.add_column("users", sa.Column("profile_image_url", sa.String(1024), nullable=True))


def downgrade() -> None:
    op.drop_column("users", "profile_image_url")
    op.drop_column("users", "profile_image_public_id")
