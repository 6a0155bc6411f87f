"""create_users_and_todos

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:12:04.318842
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False, comment='邮箱'),
        sa.Column('hashed_pwd', sa.String(length=256), nullable=False, comment='密码哈希'),
        sa.Column(
            'tokens',
            sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'),
            nullable=False,
            comment='活跃会话 Token 列表',
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
            comment='创建时间',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'todos',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False, comment='待办内容'),
        sa.Column(
            'completed',
            sa.Boolean(),
            server_default='false',
            nullable=False,
            comment='是否完成',
        ),
        sa.Column('completed_at', sa.BigInteger(), nullable=True, comment='完成时间（epoch 毫秒）'),
        sa.Column('creator', sa.Uuid(), nullable=False, comment='所属用户'),
        sa.ForeignKeyConstraint(['creator'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_todos_creator'), 'todos', ['creator'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_todos_creator'), table_name='todos')
    op.drop_table('todos')
    op.drop_table('users')
