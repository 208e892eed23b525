"""create_menu_permission_tables

Revision ID: 20261019_menu
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019_menu'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('role_name', sa.String(length=64), nullable=False, server_default='Reservation Officer'),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role_name', sa.String(length=64), nullable=False),
        sa.Column('description', sa.String(length=256), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_roles_role_name'), 'user_roles', ['role_name'], unique=True)

    op.create_table(
        'menu_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('menu_id', sa.String(length=100), nullable=False),
        sa.Column('label', sa.String(length=128), nullable=False),
        sa.Column('icon', sa.String(length=64), nullable=True),
        sa.Column('href', sa.String(length=256), nullable=True),
        sa.Column('parent_id', sa.String(length=100), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_menu_items_menu_id'), 'menu_items', ['menu_id'], unique=True)
    op.create_index(op.f('ix_menu_items_parent_id'), 'menu_items', ['parent_id'], unique=False)

    op.create_table(
        'menu_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('menu_id', sa.String(length=100), nullable=False),
        sa.Column('role_name', sa.String(length=64), nullable=False),
        sa.Column('can_view', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['menu_id'], ['menu_items.menu_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role_name', 'menu_id', name='uq_role_menu'),
    )
    op.create_index(op.f('ix_menu_permissions_menu_id'), 'menu_permissions', ['menu_id'], unique=False)
    op.create_index(op.f('ix_menu_permissions_role_name'), 'menu_permissions', ['role_name'], unique=False)


def downgrade() -> None:
    # menu_permissions first (foreign key to menu_items)
    op.drop_index(op.f('ix_menu_permissions_role_name'), table_name='menu_permissions')
    op.drop_index(op.f('ix_menu_permissions_menu_id'), table_name='menu_permissions')
    op.drop_table('menu_permissions')

    op.drop_index(op.f('ix_menu_items_parent_id'), table_name='menu_items')
    op.drop_index(op.f('ix_menu_items_menu_id'), table_name='menu_items')
    op.drop_table('menu_items')

    op.drop_index(op.f('ix_user_roles_role_name'), table_name='user_roles')
    op.drop_table('user_roles')

    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
