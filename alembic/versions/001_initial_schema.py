"""Initial schema — catalog (services, locations, requirements), addresses, orders.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ORDER_STATUSES = (
    "'draft', 'submitted', 'processing', 'more_info_needed', 'completed', 'cancelled'"
)


def upgrade() -> None:
    op.create_table(
        "services",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
    )

    op.create_table(
        "locations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code2", sa.String(10), nullable=True),
        sa.Column("subregion1", sa.String(200), nullable=True),
        sa.Column("subregion2", sa.String(200), nullable=True),
        sa.Column("parent_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=True),
    )

    op.create_table(
        "requirements",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("field_data", sa.JSON, nullable=True),
        sa.Column("document_data", sa.JSON, nullable=True),
        sa.Column("disabled", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "service_requirements",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("service_id", UUID(as_uuid=True), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("requirement_id", UUID(as_uuid=True), sa.ForeignKey("requirements.id"), nullable=False),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint("service_id", "requirement_id", name="uq_service_requirement"),
    )
    op.create_index("ix_service_requirements_service_id", "service_requirements", ["service_id"])

    op.create_table(
        "location_requirement_mappings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("service_id", UUID(as_uuid=True), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("location_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("requirement_id", UUID(as_uuid=True), sa.ForeignKey("requirements.id"), nullable=False),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default="false"),
        sa.UniqueConstraint(
            "service_id", "location_id", "requirement_id",
            name="uq_location_requirement_mapping",
        ),
    )
    op.create_index(
        "ix_location_requirement_mappings_service_id",
        "location_requirement_mappings", ["service_id"],
    )

    op.create_table(
        "address_entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("street1", sa.String(255), nullable=True),
        sa.Column("street2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=True),
        sa.Column("county_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "orders",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("order_number", sa.String(40), nullable=False, unique=True),
        sa.Column("customer_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status_code", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("subject", sa.JSON, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(f"status_code IN ({_ORDER_STATUSES})", name="ck_orders_status_code"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])

    op.create_table(
        "order_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "order_id", UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("service_id", UUID(as_uuid=True), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("location_id", UUID(as_uuid=True), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_data",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "order_item_id", UUID(as_uuid=True),
            sa.ForeignKey("order_items.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("field_name", sa.String(255), nullable=False),
        sa.Column("field_value", sa.Text, nullable=False),
        sa.Column("field_type", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_order_data_order_item_id", "order_data", ["order_item_id"])

    op.create_table(
        "order_status_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "order_id", UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("from_status", sa.String(20), nullable=False),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("changed_by", sa.String(64), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_order_status_history_order_id", "order_status_history", ["order_id"])


def downgrade() -> None:
    op.drop_table("order_status_history")
    op.drop_table("order_data")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("address_entries")
    op.drop_table("location_requirement_mappings")
    op.drop_table("service_requirements")
    op.drop_table("requirements")
    op.drop_table("locations")
    op.drop_table("services")
