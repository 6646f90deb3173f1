"""create contacts

Revision ID: 001
Revises:
Create Date: 2020-11-15 21:53:42.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'contacts',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('firstName', sa.String(255), nullable=False),
        sa.Column('lastName', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('zipcode', sa.String(255), nullable=True),
        sa.Column('isAVampire', sa.Boolean(), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('createdAt', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updatedAt', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('email', name='uq_contacts_email'),
    )


def downgrade() -> None:
    op.drop_table('contacts')
