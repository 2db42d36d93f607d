"""Initial schema - tenants, kitchens, food supply and recipe usage

Revision ID: 001
Revises:
Create Date: 2025-03-02

Creates:
- organizations
- users
- kitchens
- food_supplies
- food_consumptions
- recipes
- recipe_usages
- food_disposals
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === ORGANIZATIONS ===
    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )

    # === USERS ===
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="STAFF"),
        sa.Column("is_admin", sa.Boolean, server_default="false"),
        sa.Column("page_access", postgresql.JSON),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id")),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )
    op.create_index("idx_users_organization", "users", ["organization_id"])

    # === KITCHENS ===
    op.create_table(
        "kitchens",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("floor_number", sa.Integer),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id")),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )
    op.create_index("idx_kitchens_organization", "kitchens", ["organization_id"])

    # === FOOD_SUPPLIES ===
    op.create_table(
        "food_supplies",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("unit", sa.String(20)),
        sa.Column("category", sa.String(50)),
        sa.Column("quantity", sa.Float, server_default="0"),
        sa.Column("price_per_unit", sa.Float),
        sa.Column("expiration_date", sa.TIMESTAMP),
        sa.Column("kitchen_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("kitchens.id")),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id")),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )
    op.create_index("idx_food_supplies_kitchen", "food_supplies", ["kitchen_id"])
    op.create_index("idx_food_supplies_expiration", "food_supplies", ["expiration_date"])

    # === FOOD_CONSUMPTIONS ===
    op.create_table(
        "food_consumptions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("date", sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
        sa.Column("kitchen_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("kitchens.id"), nullable=False),
        sa.Column("food_supply_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("food_supplies.id")),
        sa.Column("quantity", sa.Float, nullable=False, server_default="0"),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
        sa.Column("notes", sa.Text),
    )
    op.create_index("idx_food_consumptions_kitchen_date", "food_consumptions", ["kitchen_id", "date"])
    op.create_index("idx_food_consumptions_user", "food_consumptions", ["user_id"])

    # === RECIPES ===
    op.create_table(
        "recipes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_subrecipe", sa.Boolean, server_default="false"),
        sa.Column("total_cost", sa.Float),
        sa.Column("selling_price", sa.Float),
        sa.Column("kitchen_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("kitchens.id")),
        sa.Column("created_at", sa.TIMESTAMP, server_default=sa.func.now()),
        sa.Column("updated_at", sa.TIMESTAMP, server_default=sa.func.now()),
    )

    # === RECIPE_USAGES ===
    op.create_table(
        "recipe_usages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
        sa.Column("kitchen_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("kitchens.id"), nullable=False),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("recipes.id")),
        sa.Column("servings_used", sa.Float),
        sa.Column("cost", sa.Float),
        sa.Column("selling_price", sa.Float),
        sa.Column("waste", sa.Float),
        sa.Column("profit", sa.Float),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
    )
    op.create_index("idx_recipe_usages_kitchen_created", "recipe_usages", ["kitchen_id", "created_at"])
    op.create_index("idx_recipe_usages_user", "recipe_usages", ["user_id"])

    # === FOOD_DISPOSALS ===
    op.create_table(
        "food_disposals",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.TIMESTAMP, nullable=False, server_default=sa.func.now()),
        sa.Column("kitchen_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("kitchens.id")),
        sa.Column("food_supply_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("food_supplies.id")),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("recipes.id")),
        sa.Column("quantity", sa.Float, nullable=False, server_default="0"),
        sa.Column("reason", sa.String(50)),
        sa.Column("source", sa.String(20)),
        sa.Column("notes", sa.Text),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id")),
    )
    op.create_index("idx_food_disposals_kitchen_created", "food_disposals", ["kitchen_id", "created_at"])
    op.create_index("idx_food_disposals_supply", "food_disposals", ["food_supply_id"])


def downgrade() -> None:
    op.drop_table("food_disposals")
    op.drop_table("recipe_usages")
    op.drop_table("recipes")
    op.drop_table("food_consumptions")
    op.drop_table("food_supplies")
    op.drop_table("kitchens")
    op.drop_table("users")
    op.drop_table("organizations")
