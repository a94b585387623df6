"""initial_marketplace_schema

Revision ID: 3f9c2a71b8d4
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a71b8d4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("profile_picture_url", sa.String(512), nullable=True),
        sa.Column("account_type", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("phone_number", name="uq_users_phone_number"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "amenities",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon_name", sa.String(100), nullable=True),
        sa.UniqueConstraint("name", name="uq_amenities_name"),
    )

    op.create_table(
        "villas",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("host_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("property_type", sa.String(50), nullable=False),
        sa.Column("num_guests", sa.Integer(), nullable=False),
        sa.Column("num_bedrooms", sa.Integer(), nullable=False),
        sa.Column("num_beds", sa.Integer(), nullable=False),
        sa.Column("num_bathrooms", sa.Integer(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(10, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), nullable=True),
        sa.Column("minimum_nights", sa.Integer(), nullable=False),
        sa.Column("house_rules", sa.Text(), nullable=True),
        sa.Column("preferred_payment_method", sa.String(50), nullable=False),
        sa.Column("exact_address", sa.String(500), nullable=True),
        sa.Column("directions_landmarks", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 8), nullable=True),
        sa.Column("longitude", sa.Numeric(11, 8), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_villas_host_id", "villas", ["host_id"])
    op.create_index("ix_villas_status", "villas", ["status"])

    op.create_table(
        "villa_amenities",
        sa.Column("villa_id", sa.UUID(), sa.ForeignKey("villas.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("amenity_id", sa.UUID(), sa.ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("villa_id", sa.UUID(), sa.ForeignKey("villas.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("guest_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("host_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("num_guests", sa.Integer(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("guest_message", sa.Text(), nullable=False),
        sa.Column("cancellation_reason", sa.String(255), nullable=True),
        sa.Column("cancellation_message", sa.Text(), nullable=True),
        sa.Column("check_in_instructions", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("check_out > check_in", name="ck_bookings_checkout_after_checkin"),
    )
    op.create_index("ix_bookings_villa_id", "bookings", ["villa_id"])
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_host_id", "bookings", ["host_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_villa_dates", "bookings", ["villa_id", "check_in", "check_out"])

    # One row per (villa, night); the composite key is what the guarded upserts conflict on
    op.create_table(
        "availability",
        sa.Column("villa_id", sa.UUID(), sa.ForeignKey("villas.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("booking_id", sa.UUID(), sa.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_availability_villa_status_date", "availability", ["villa_id", "status", "date"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("booking_id", sa.UUID(), sa.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewer_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reviewee_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("public_rating", sa.Integer(), nullable=False),
        sa.Column("public_comment", sa.Text(), nullable=True),
        sa.Column("private_feedback", sa.Text(), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("public_rating >= 1 AND public_rating <= 5", name="ck_reviews_rating_range"),
        sa.CheckConstraint("reviewer_id != reviewee_id", name="ck_reviews_not_self"),
        sa.UniqueConstraint("booking_id", "reviewer_id", "reviewee_id", name="uq_reviews_booking_pair"),
    )
    op.create_index("ix_reviews_booking_id", "reviews", ["booking_id"])
    op.create_index("ix_reviews_reviewer_id", "reviews", ["reviewer_id"])
    op.create_index("ix_reviews_reviewee_id", "reviews", ["reviewee_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("availability")
    op.drop_table("bookings")
    op.drop_table("villa_amenities")
    op.drop_table("villas")
    op.drop_table("amenities")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
