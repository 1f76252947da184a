"""media and mediables

Revision ID: 5c1e2a7f9b30
Revises:
Create Date: 2025-10-12 14:21:07.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from mediable.common.settings import get_settings

# revision identifiers, used by Alembic.
revision: str = '5c1e2a7f9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_cfg = get_settings()
SCHEMA = _cfg.db_schema
PIVOT = _cfg.mediable.mediables_table
_media_ref = f"{SCHEMA}.media.id" if SCHEMA else "media.id"


def upgrade() -> None:
    op.create_table(
        'media',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('data_origin', sa.Text(), nullable=True),
        sa.Column('meta_data', sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'), nullable=True),
        sa.Column('disk', sa.String(length=32), server_default=sa.text("'local'"), nullable=False),
        sa.Column('directory', sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('extension', sa.String(length=32), nullable=False),
        sa.Column('mime_type', sa.String(length=128), nullable=True),
        sa.Column('aggregate_type', sa.String(length=32), nullable=True),
        sa.Column('size', sa.BigInteger(), server_default=sa.text('0'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_media')),
        sa.UniqueConstraint('disk', 'directory', 'filename', 'extension', name='uq_media_disk_path'),
        schema=SCHEMA,
    )
    op.create_index('ix_media_aggregate_type', 'media', ['aggregate_type'], unique=False, schema=SCHEMA)

    op.create_table(
        PIVOT,
        sa.Column('media_id', sa.Uuid(), nullable=False),
        sa.Column('mediable_type', sa.String(length=255), nullable=False),
        sa.Column('mediable_id', sa.Uuid(), nullable=False),
        sa.Column('tag', sa.String(length=255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['media_id'], [_media_ref],
                                name=op.f(f'fk_{PIVOT}_media_id_media'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('media_id', 'mediable_type', 'mediable_id', 'tag', name=op.f(f'pk_{PIVOT}')),
        schema=SCHEMA,
    )
    op.create_index(f'ix_{PIVOT}_mediable', PIVOT, ['mediable_type', 'mediable_id'], unique=False, schema=SCHEMA)
    op.create_index(f'ix_{PIVOT}_tag', PIVOT, ['tag'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    op.drop_index(f'ix_{PIVOT}_tag', table_name=PIVOT, schema=SCHEMA)
    op.drop_index(f'ix_{PIVOT}_mediable', table_name=PIVOT, schema=SCHEMA)
    op.drop_table(PIVOT, schema=SCHEMA)
    op.drop_index('ix_media_aggregate_type', table_name='media', schema=SCHEMA)
    op.drop_table('media', schema=SCHEMA)
