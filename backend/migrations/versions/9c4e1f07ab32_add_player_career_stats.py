"""add career_stats to players

Revision ID: 9c4e1f07ab32
Revises: 5b7e2d41c9a0
Create Date: 2026-03-02 09:15:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9c4e1f07ab32'
down_revision = '5b7e2d41c9a0'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('players')}
    with op.batch_alter_table('players') as batch_op:
        if 'career_stats' not in cols:
            batch_op.add_column(sa.Column('career_stats', sa.JSON(), nullable=True))


def downgrade():
    with op.batch_alter_table('players') as batch_op:
        batch_op.drop_column('career_stats')
