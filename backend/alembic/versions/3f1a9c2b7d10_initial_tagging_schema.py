"""initial_tagging_schema

Revision ID: 3f1a9c2b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

VALUE_TYPES = ('TEXT', 'DROPDOWN', 'MULTISELECT', 'BOOLEAN', 'NUMBER', 'DATE')


def upgrade() -> None:
    """Create framework, key, template, file tag and settings tables."""
    op.create_table(
        'tag_frameworks',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('org_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tag_frameworks_org_id_name', 'tag_frameworks', ['org_id', 'name'])

    op.create_table(
        'tag_keys',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('org_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('hex', sa.String(length=16), nullable=False),
        sa.Column(
            'framework_id',
            sa.String(length=36),
            sa.ForeignKey('tag_frameworks.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_tag_keys_org_id_title', 'tag_keys', ['org_id', 'title'])

    op.create_table(
        'tag_templates',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column(
            'framework_id',
            sa.String(length=36),
            sa.ForeignKey('tag_frameworks.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'key_id',
            sa.String(length=36),
            sa.ForeignKey('tag_keys.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('value_type', sa.Enum(*VALUE_TYPES, name='tagvaluetype'), nullable=True),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('default_value', sa.JSON(), nullable=True),
    )
    op.create_index('ix_tag_templates_framework_id', 'tag_templates', ['framework_id'])

    op.create_table(
        'file_tags',
        sa.Column('uuid', sa.String(length=36), primary_key=True),
        sa.Column('file_id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column(
            'key_id',
            sa.String(length=36),
            sa.ForeignKey('tag_keys.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column(
            'framework_id',
            sa.String(length=36),
            sa.ForeignKey('tag_frameworks.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_file_tags_file_id', 'file_tags', ['file_id'])

    op.create_table(
        'app_settings',
        sa.Column('org_id', sa.String(length=64), primary_key=True),
        sa.Column('key', sa.String(length=64), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )


def downgrade() -> None:
    """Drop all tagging tables."""
    op.drop_table('app_settings')
    op.drop_index('ix_file_tags_file_id', table_name='file_tags')
    op.drop_table('file_tags')
    op.drop_index('ix_tag_templates_framework_id', table_name='tag_templates')
    op.drop_table('tag_templates')
    op.drop_index('ix_tag_keys_org_id_title', table_name='tag_keys')
    op.drop_table('tag_keys')
    op.drop_index('ix_tag_frameworks_org_id_name', table_name='tag_frameworks')
    op.drop_table('tag_frameworks')
