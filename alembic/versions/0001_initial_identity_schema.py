"""Initial identity schema

Revision ID: 0001_initial_identity_schema
Revises:
Create Date: 2026-01-04 18:23:19.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_identity_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _user_fk() -> sa.Column:
    return sa.Column(
        'user_id',
        sa.String(36),
        sa.ForeignKey('users.id', ondelete='CASCADE'),
        primary_key=True,
    )


def upgrade() -> None:
    """Create users, its credential satellites, sessions and inactive_users."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('avatar', sa.String(2048), nullable=True),
        sa.Column('service_id', sa.String(64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_service_id', 'users', ['service_id'])
    op.create_index('ux_users_email_service_id', 'users', ['email', 'service_id'], unique=True)

    op.create_table(
        'email_info',
        _user_fk(),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('verification_token', sa.String(64), nullable=True),
        sa.Column('verification_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pending_email', sa.String(320), nullable=True),
        sa.Column('provider', sa.String(32), nullable=True),
    )
    op.create_index('ix_email_info_verification_token', 'email_info', ['verification_token'])

    op.create_table(
        'password_info',
        _user_fk(),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('reset_token', sa.String(64), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_password_info_reset_token', 'password_info', ['reset_token'])

    op.create_table(
        'lockout_info',
        _user_fk(),
        sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failed_attempts', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('device_id', sa.String(255), nullable=True),
        sa.Column('refresh_token', sa.String(64), nullable=False),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ux_sessions_refresh_token', 'sessions', ['refresh_token'], unique=True)
    op.create_index('ux_sessions_user_id_device_id', 'sessions', ['user_id', 'device_id'], unique=True)
    op.create_index('ix_sessions_expires_at', 'sessions', ['expires_at'])

    op.create_table(
        'inactive_users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('phone', sa.String(32), nullable=True),
        sa.Column('service_id', sa.String(64), nullable=False),
        sa.Column('account_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('archived_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_inactive_users_user_id', 'inactive_users', ['user_id'])


def downgrade() -> None:
    """Drop every identity table."""
    op.drop_table('inactive_users')
    op.drop_table('sessions')
    op.drop_table('lockout_info')
    op.drop_table('password_info')
    op.drop_table('email_info')
    op.drop_table('users')
