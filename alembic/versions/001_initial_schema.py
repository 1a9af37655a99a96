"""Initial schema: users, hotels, bookings, reviews with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUSES = (
    "PAYMENT_DONE", "ID_PENDING", "ID_SUBMITTED", "CONFIRMED", "COMPLETED",
    "REJECTED", "CANCELLED", "REFUND_PENDING", "REFUNDED",
)


def _in(column: str, values) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("total_bookings", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_spent", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint(_in("role", ("user", "hotel_owner", "admin")), name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "hotels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("country", sa.String(120), nullable=False, server_default=""),
        sa.Column("price_per_night", sa.Numeric(12, 2), nullable=False),
        sa.Column("price_per_hour", sa.Numeric(12, 2), nullable=True),
        sa.Column("adult_count", sa.Integer(), nullable=False, server_default=sa.text("2")),
        sa.Column("child_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("requires_id_proof", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("total_bookings", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_revenue", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("price_per_night >= 0", name="check_price_per_night_non_negative"),
        sa.CheckConstraint("adult_count > 0", name="check_hotel_adult_capacity_positive"),
        sa.CheckConstraint("child_count >= 0", name="check_hotel_child_capacity_non_negative"),
    )
    op.create_index("ix_hotels_id", "hotels", ["id"])
    op.create_index("ix_hotels_owner_id", "hotels", ["owner_id"])
    op.create_index("ix_hotels_created_at", "hotels", ["created_at"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("hotel_id", sa.Integer(), sa.ForeignKey("hotels.id"), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("adult_count", sa.Integer(), nullable=False),
        sa.Column("child_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("check_in", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out", sa.DateTime(timezone=True), nullable=False),
        sa.Column("booking_type", sa.String(10), nullable=False, server_default=sa.text("'nightly'")),
        sa.Column("total_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'ID_PENDING'")),
        sa.Column("payment_status", sa.String(10), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("payment_reference", sa.String(100), nullable=True),
        sa.Column("refund_amount", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("cancellation_reason", sa.String(500), nullable=True),
        sa.Column("rejection_reason", sa.String(500), nullable=True),
        sa.Column("id_proof_type", sa.String(20), nullable=True),
        sa.Column("id_proof_front_image", sa.Text(), nullable=True),
        sa.Column("id_proof_back_image", sa.Text(), nullable=True),
        sa.Column("id_proof_status", sa.String(10), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("id_proof_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("id_proof_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("id_proof_rejection_reason", sa.String(500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("check_out > check_in", name="check_booking_interval_positive"),
        sa.CheckConstraint("adult_count >= 1", name="check_booking_adults_positive"),
        sa.CheckConstraint("child_count >= 0", name="check_booking_children_non_negative"),
        sa.CheckConstraint("total_cost >= 0", name="check_booking_cost_non_negative"),
        sa.CheckConstraint(_in("status", BOOKING_STATUSES), name="check_booking_status"),
        sa.CheckConstraint(
            _in("payment_status", ("pending", "paid", "failed", "refunded")), name="check_booking_payment_status"
        ),
        sa.CheckConstraint(_in("booking_type", ("nightly", "hourly")), name="check_booking_type"),
        sa.CheckConstraint(
            _in("id_proof_status", ("PENDING", "SUBMITTED", "VERIFIED", "REJECTED")),
            name="check_booking_id_proof_status",
        ),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_hotel_id", "bookings", ["hotel_id"])
    op.create_index("ix_bookings_email", "bookings", ["email"])
    op.create_index("ix_bookings_check_in", "bookings", ["check_in"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_payment_status", "bookings", ["payment_status"])
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"])
    # Overlap lookups filter by hotel and compare check_in against the requested check_out
    op.create_index("ix_bookings_hotel_check_in", "bookings", ["hotel_id", "check_in"])
    # "My bookings", newest first
    op.create_index("ix_bookings_user_created", "bookings", ["user_id", "created_at"])
    # Completion sweep and status breakdowns
    op.create_index("ix_bookings_status_created", "bookings", ["status", "created_at"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("hotel_id", sa.Integer(), sa.ForeignKey("hotels.id"), nullable=False),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("cleanliness", sa.Integer(), nullable=False),
        sa.Column("service", sa.Integer(), nullable=False),
        sa.Column("location", sa.Integer(), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("amenities", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("booking_id", name="uq_review_booking"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="check_review_rating_range"),
    )
    op.create_index("ix_reviews_id", "reviews", ["id"])
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])
    op.create_index("ix_reviews_hotel_id", "reviews", ["hotel_id"])
    op.create_index("ix_reviews_created_at", "reviews", ["created_at"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("bookings")
    op.drop_table("hotels")
    op.drop_table("users")
