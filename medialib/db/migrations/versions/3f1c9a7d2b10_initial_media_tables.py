"""initial media tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-09-28 10:14:32.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('media_folder',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('parent_id', sa.Integer(), nullable=True),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('created_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('updated_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.ForeignKeyConstraint(['parent_id'], ['media_folder.id'], name=op.f('fk_media_folder_parent_id_media_folder')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_media_folder'))
    )
    with op.batch_alter_table('media_folder', schema=None) as batch_op:
        batch_op.create_index('idx_media_folder_parent', ['parent_id'], unique=False)

    op.create_table('media',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('filename', sa.String(), nullable=False),
    sa.Column('original_name', sa.String(), nullable=True),
    sa.Column('mime_type', sa.String(length=100), nullable=True),
    sa.Column('size', sa.Integer(), nullable=False),
    sa.Column('width', sa.Integer(), nullable=True),
    sa.Column('height', sa.Integer(), nullable=True),
    sa.Column('alt_text', sa.Text(), nullable=True),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('folder_id', sa.Integer(), nullable=True),
    sa.Column('created_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('updated_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.ForeignKeyConstraint(['folder_id'], ['media_folder.id'], name=op.f('fk_media_folder_id_media_folder')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_media'))
    )
    with op.batch_alter_table('media', schema=None) as batch_op:
        batch_op.create_index('idx_media_folder', ['folder_id'], unique=False)

    op.create_table('image_gallery',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('title', sa.String(), nullable=False),
    sa.Column('slug', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('created_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.Column('updated_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_image_gallery')),
    sa.UniqueConstraint('slug', name=op.f('uq_image_gallery_slug'))
    )

    op.create_table('gallery_image',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('gallery_id', sa.Integer(), nullable=False),
    sa.Column('media_id', sa.Integer(), nullable=False),
    sa.Column('caption', sa.Text(), nullable=True),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.String(), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    sa.ForeignKeyConstraint(['gallery_id'], ['image_gallery.id'], name=op.f('fk_gallery_image_gallery_id_image_gallery'), ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['media_id'], ['media.id'], name=op.f('fk_gallery_image_media_id_media'), ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_gallery_image'))
    )
    with op.batch_alter_table('gallery_image', schema=None) as batch_op:
        batch_op.create_index('idx_gallery_image_gallery_order', ['gallery_id', 'sort_order'], unique=False)
        batch_op.create_index('idx_gallery_image_media', ['media_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('gallery_image', schema=None) as batch_op:
        batch_op.drop_index('idx_gallery_image_media')
        batch_op.drop_index('idx_gallery_image_gallery_order')

    op.drop_table('gallery_image')
    op.drop_table('image_gallery')
    with op.batch_alter_table('media', schema=None) as batch_op:
        batch_op.drop_index('idx_media_folder')

    op.drop_table('media')
    with op.batch_alter_table('media_folder', schema=None) as batch_op:
        batch_op.drop_index('idx_media_folder_parent')

    op.drop_table('media_folder')
