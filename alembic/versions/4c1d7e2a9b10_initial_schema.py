"""initial_schema

Revision ID: 4c1d7e2a9b10
Revises: 
Create Date: 2026-10-19 09:12:41.118204

Production-safe migration: Only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '4c1d7e2a9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    """Create companies, users, plans, subscriptions and maintenance_settings."""
    if not table_exists('companies'):
        op.create_table('companies',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('company_name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
        op.create_index(op.f('ix_companies_email'), 'companies', ['email'], unique=True)

    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('full_name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('password_hash', sa.String(), nullable=True),
            sa.Column('role', sa.String(), nullable=False, server_default='company_admin'),
            sa.Column('company_id', sa.Integer(), nullable=True),
            sa.Column('module_access', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_company_id'), 'users', ['company_id'], unique=False)

    if not table_exists('plans'):
        op.create_table('plans',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('per_user_cost', sa.Float(), nullable=False),
            sa.Column('module_costs', sa.JSON(), nullable=False),
            sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_by', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_plans_id'), 'plans', ['id'], unique=False)
        op.create_index(op.f('ix_plans_is_active'), 'plans', ['is_active'], unique=False)

    if not table_exists('subscriptions'):
        op.create_table('subscriptions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('company_id', sa.Integer(), nullable=False),
            sa.Column('number_of_days', sa.Integer(), nullable=False),
            sa.Column('number_of_users', sa.Integer(), nullable=False),
            sa.Column('selected_modules', sa.JSON(), nullable=False),
            sa.Column('total_amount', sa.Float(), nullable=False),
            sa.Column('subscription_start_date', sa.DateTime(timezone=True), nullable=False),
            sa.Column('subscription_end_date', sa.DateTime(timezone=True), nullable=False),
            sa.Column('grace_period_end', sa.DateTime(timezone=True), nullable=True),
            sa.Column('payment_status', sa.String(), nullable=False, server_default='pending'),
            sa.Column('payment_method', sa.String(), nullable=True),
            sa.Column('payment_transaction_id', sa.String(), nullable=True),
            sa.Column('is_renewal', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
            sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'], unique=False)
        op.create_index(op.f('ix_subscriptions_company_id'), 'subscriptions', ['company_id'], unique=False)
        op.create_index('idx_subscription_company_payment', 'subscriptions', ['company_id', 'payment_status'], unique=False)
        op.create_index('idx_subscription_dates', 'subscriptions', ['subscription_start_date', 'subscription_end_date'], unique=False)

    if not table_exists('maintenance_settings'):
        op.create_table('maintenance_settings',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('message', sa.String(), nullable=False, server_default=''),
            sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('modules', sa.JSON(), nullable=False),
            sa.Column('updated_by', sa.Integer(), nullable=True),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_maintenance_settings_id'), 'maintenance_settings', ['id'], unique=False)


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('maintenance_settings')
    op.drop_table('subscriptions')
    op.drop_table('plans')
    op.drop_table('users')
    op.drop_table('companies')
