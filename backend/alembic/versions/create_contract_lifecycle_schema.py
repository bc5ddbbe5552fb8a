"""Create contract lifecycle tables

Revision ID: create_contract_lifecycle_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_contract_lifecycle_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'contracts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('owner_id', sa.String(128), nullable=False),
        sa.Column('original_filename', sa.Text, nullable=False),
        sa.Column('file_url', sa.Text, nullable=False),
        sa.Column('file_type', sa.String(255), nullable=False),
        sa.Column('file_size', sa.BigInteger, nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='Draft'),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('extracted_text', sa.Text, nullable=True),
        sa.Column('summary', sa.Text, nullable=True),
        sa.Column('last_version_number', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('file_size >= 0', name='ck_contracts_file_size_non_negative'),
    )
    op.create_index('ix_contracts_owner_id', 'contracts', ['owner_id'])

    op.create_table(
        'contract_versions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('contract_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('contracts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('file_url', sa.Text, nullable=False),
        sa.Column('version_number', sa.Integer, nullable=False),
        sa.Column('version_name', sa.Text, nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('contract_id', 'version_number', name='uq_contract_version_number'),
    )
    op.create_index('ix_contract_versions_contract_id', 'contract_versions', ['contract_id'])

    op.create_table(
        'documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('file_url', sa.Text, nullable=False),
        sa.Column('file_type', sa.String(255), nullable=False),
        sa.Column('file_size', sa.BigInteger, nullable=False),
        sa.Column('uploaded_by', sa.String(128), nullable=False),
        sa.Column('status', sa.String(32), nullable=False, server_default='pending'),
        sa.Column('extracted_text', sa.Text, nullable=True),
        sa.Column('summary', sa.Text, nullable=True),
        sa.Column('tags', sa.JSON, nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('file_size >= 0', name='ck_documents_file_size_non_negative'),
    )
    op.create_index('ix_documents_uploaded_by', 'documents', ['uploaded_by'])
    op.create_index('ix_documents_status', 'documents', ['status'])


def downgrade() -> None:
    op.drop_index('ix_documents_status', table_name='documents')
    op.drop_index('ix_documents_uploaded_by', table_name='documents')
    op.drop_table('documents')
    op.drop_index('ix_contract_versions_contract_id', table_name='contract_versions')
    op.drop_table('contract_versions')
    op.drop_index('ix_contracts_owner_id', table_name='contracts')
    op.drop_table('contracts')
