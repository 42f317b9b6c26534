"""migrate legacy phone column into phone_number

Revision ID: 0002_migrate_legacy_phone
Revises: 0001_initial_schema
Create Date: 2026-10-05 16:44:09.527731

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_migrate_legacy_phone'
down_revision: Union[str, None] = '0001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing phone_number values take precedence over the legacy column
    op.execute(
        "UPDATE users SET phone_number = phone "
        "WHERE phone_number IS NULL AND phone IS NOT NULL"
    )
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('phone')


def downgrade() -> None:
    with op.batch_alter_table('users') as batch_op:
        batch_op.add_column(sa.Column('phone', sa.String(length=20), nullable=True))
    op.execute("UPDATE users SET phone = phone_number")
