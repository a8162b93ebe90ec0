"""initial schema: users, bike models, inventory, bills, counters

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = postgresql.ENUM("admin", "user", name="user_role", create_type=False)
BILL_TYPE = postgresql.ENUM("cash", "leasing", "advance", name="bill_type", create_type=False)
VEHICLE_TYPE = postgresql.ENUM(
    "E-MOTORCYCLE", "E-MOTORBICYCLE", "E-TRICYCLE", name="vehicle_type", create_type=False
)
BILL_STATUS = postgresql.ENUM(
    "pending", "completed", "cancelled", "converted", name="bill_status", create_type=False
)
BIKE_STATUS = postgresql.ENUM(
    "available", "sold", "reserved", "damaged", name="bike_status", create_type=False
)
ENUMS = (USER_ROLE, BILL_TYPE, VEHICLE_TYPE, BILL_STATUS, BIKE_STATUS)


def _timestamps():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "users",
        *_timestamps(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)
    op.create_index(op.f("ix_users_is_active"), "users", ["is_active"], unique=False)

    op.create_table(
        "bike_models",
        *_timestamps(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_ebicycle", sa.Boolean(), nullable=False),
        sa.Column("is_tricycle", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_bike_models_id"), "bike_models", ["id"], unique=False)

    op.create_table(
        "bills",
        *_timestamps(),
        sa.Column("bill_number", sa.String(32), nullable=False),
        sa.Column("owner_id", sa.UUID(), nullable=True),
        sa.Column("bill_type", BILL_TYPE, nullable=False),
        sa.Column("vehicle_type", VEHICLE_TYPE, nullable=False),
        sa.Column("is_ebicycle", sa.Boolean(), nullable=False),
        sa.Column("is_tricycle", sa.Boolean(), nullable=False),
        sa.Column("is_first_tricycle_sale", sa.Boolean(), nullable=False),
        sa.Column("bike_model", sa.String(255), nullable=False),
        sa.Column("bike_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("rmv_charge", sa.Numeric(12, 2), nullable=True),
        sa.Column("down_payment", sa.Numeric(12, 2), nullable=True),
        sa.Column("balance_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("customer_nic", sa.String(32), nullable=False),
        sa.Column("customer_address", sa.Text(), nullable=False),
        sa.Column("motor_number", sa.String(64), nullable=False),
        sa.Column("chassis_number", sa.String(64), nullable=False),
        sa.Column("bill_date", sa.DateTime(), nullable=True),
        sa.Column("estimated_delivery_date", sa.DateTime(), nullable=True),
        sa.Column("status", BILL_STATUS, nullable=False),
        sa.Column("inventory_item_id", sa.UUID(), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bills_id"), "bills", ["id"], unique=False)
    op.create_index(op.f("ix_bills_bill_number"), "bills", ["bill_number"], unique=True)
    op.create_index(op.f("ix_bills_owner_id"), "bills", ["owner_id"], unique=False)
    op.create_index(op.f("ix_bills_bill_type"), "bills", ["bill_type"], unique=False)
    op.create_index(op.f("ix_bills_is_tricycle"), "bills", ["is_tricycle"], unique=False)
    op.create_index(op.f("ix_bills_total_amount"), "bills", ["total_amount"], unique=False)
    op.create_index(op.f("ix_bills_customer_name"), "bills", ["customer_name"], unique=False)
    op.create_index(op.f("ix_bills_customer_nic"), "bills", ["customer_nic"], unique=False)
    op.create_index(op.f("ix_bills_bill_date"), "bills", ["bill_date"], unique=False)
    op.create_index(op.f("ix_bills_status"), "bills", ["status"], unique=False)

    op.create_table(
        "bike_inventory",
        *_timestamps(),
        sa.Column("bike_model_id", sa.UUID(), nullable=False),
        sa.Column("motor_number", sa.String(64), nullable=False),
        sa.Column("chassis_number", sa.String(64), nullable=False),
        sa.Column("status", BIKE_STATUS, nullable=False),
        sa.Column("date_added", sa.DateTime(), nullable=False),
        sa.Column("date_sold", sa.DateTime(), nullable=True),
        sa.Column("bill_id", sa.UUID(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("added_by", sa.UUID(), nullable=True),
        sa.Column("deleted_by", sa.UUID(), nullable=True),
        sa.Column("delete_reason", sa.String(500), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["bike_model_id"], ["bike_models.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["bill_id"], ["bills.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["added_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["deleted_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bike_inventory_id"), "bike_inventory", ["id"], unique=False)
    op.create_index(op.f("ix_bike_inventory_status"), "bike_inventory", ["status"], unique=False)
    op.create_index(op.f("ix_bike_inventory_added_by"), "bike_inventory", ["added_by"], unique=False)
    op.create_index(op.f("ix_bike_inventory_deleted_at"), "bike_inventory", ["deleted_at"], unique=False)
    op.create_index(
        "ix_bike_inventory_model_status", "bike_inventory", ["bike_model_id", "status"], unique=False
    )
    op.create_index(
        "ix_bike_inventory_motor_number_live",
        "bike_inventory",
        ["motor_number"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )
    op.create_index(
        "ix_bike_inventory_chassis_number_live",
        "bike_inventory",
        ["chassis_number"],
        unique=True,
        postgresql_where=sa.text("deleted_at IS NULL"),
    )

    # bills and bike_inventory reference each other
    op.create_foreign_key(
        "fk_bills_inventory_item_id",
        "bills",
        "bike_inventory",
        ["inventory_item_id"],
        ["id"],
        ondelete="SET NULL",
    )

    op.create_table(
        "system_counters",
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("value", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade() -> None:
    op.drop_table("system_counters")
    op.drop_constraint("fk_bills_inventory_item_id", "bills", type_="foreignkey")
    op.drop_table("bike_inventory")
    op.drop_table("bills")
    op.drop_table("bike_models")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
