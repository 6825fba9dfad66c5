"""create claim tables

Revision ID: 4f1c9a7e2b10
Revises:
Create Date: 2026-10-19 09:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CLAIM_STATUSES = (
    'DRAFT', 'PENDING_APPROVER_REVIEW', 'PENDING_INSURER_REVIEW', 'PENDING_INSURER_FORM',
    'AWAITING_EVIDENCE', 'PENDING_MANAGER_REVIEW', 'PENDING_USER_CONFIRM',
    'AWAITING_SIGNATURES', 'COMPLETED', 'REJECTED',
)


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True, length=32)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('email', sa.String(), nullable=False),
    sa.Column('role', _enum('user_role', 'USER', 'MANAGER', 'INSURANCE'), nullable=False),
    sa.Column('position', sa.String(), nullable=True),
    sa.Column('employee_number', sa.String(), nullable=True),
    sa.Column('password_hash', sa.String(), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('employee_number')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('claims',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('category_main', sa.String(), nullable=False),
    sa.Column('category_sub', sa.String(), nullable=False),
    sa.Column('status', _enum('claim_status', *CLAIM_STATUSES), nullable=False),
    sa.Column('created_by_id', sa.Uuid(), nullable=False),
    sa.Column('created_by_name', sa.String(), nullable=False),
    sa.Column('approver_id', sa.Uuid(), nullable=True),
    sa.Column('approver_name', sa.String(), nullable=True),
    sa.Column('insurer_comment', sa.Text(), nullable=True),
    sa.Column('submitted_at', sa.TIMESTAMP(timezone=True), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['approver_id'], ['users.id']),
    sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_claims_status'), 'claims', ['status'], unique=False)
    op.create_index(op.f('ix_claims_created_by_id'), 'claims', ['created_by_id'], unique=False)
    op.create_index(op.f('ix_claims_created_at'), 'claims', ['created_at'], unique=False)

    op.create_table('cpm_forms',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('claim_id', sa.Uuid(), nullable=False),
    sa.Column('accident_date', sa.Date(), nullable=False),
    sa.Column('accident_time', sa.String(length=5), nullable=False),
    sa.Column('location', sa.String(), nullable=False),
    sa.Column('cause', sa.Text(), nullable=False),
    sa.Column('repair_shop', sa.String(), nullable=True),
    sa.Column('police_date', sa.Date(), nullable=True),
    sa.Column('police_time', sa.String(length=5), nullable=True),
    sa.Column('police_station', sa.String(), nullable=True),
    sa.Column('damage_own_type', sa.String(), nullable=False),
    sa.Column('damage_other_own', sa.String(), nullable=True),
    sa.Column('damage_detail', sa.Text(), nullable=True),
    sa.Column('damage_amount', sa.Numeric(precision=14, scale=2), nullable=True),
    sa.Column('victim_detail', sa.Text(), nullable=True),
    sa.Column('partner_name', sa.String(), nullable=True),
    sa.Column('partner_phone', sa.String(), nullable=True),
    sa.Column('partner_location', sa.String(), nullable=True),
    sa.Column('partner_damage_detail', sa.Text(), nullable=True),
    sa.Column('partner_damage_amount', sa.Numeric(precision=14, scale=2), nullable=True),
    sa.Column('partner_victim_detail', sa.Text(), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('claim_id')
    )

    op.create_table('fppa04_bases',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('claim_id', sa.Uuid(), nullable=False),
    sa.Column('main_type', sa.String(), nullable=False),
    sa.Column('sub_type', sa.String(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('claim_id')
    )

    op.create_table('fppa04_cpm',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('base_id', sa.Uuid(), nullable=False),
    sa.Column('event_type', sa.String(), nullable=True),
    sa.Column('claim_ref_number', sa.String(), nullable=True),
    sa.Column('event_description', sa.Text(), nullable=True),
    sa.Column('production_year', sa.Integer(), nullable=True),
    sa.Column('accident_date', sa.Date(), nullable=True),
    sa.Column('reported_date', sa.Date(), nullable=True),
    sa.Column('received_doc_date', sa.Date(), nullable=True),
    sa.Column('company', sa.String(), nullable=True),
    sa.Column('factory', sa.String(), nullable=True),
    sa.Column('policy_number', sa.String(), nullable=True),
    sa.Column('surveyor_ref_number', sa.String(), nullable=True),
    sa.Column('net_amount', sa.Numeric(precision=14, scale=2), nullable=False),
    sa.Column('insurance_payout', sa.Numeric(precision=14, scale=2), nullable=True),
    sa.Column('signature_files', sa.JSON(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['base_id'], ['fppa04_bases.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('base_id')
    )

    op.create_table('fppa04_cpm_items',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('cpm_id', sa.Uuid(), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False),
    sa.Column('category', sa.String(), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('total', sa.Numeric(precision=14, scale=2), nullable=False),
    sa.Column('exception', sa.Numeric(precision=14, scale=2), nullable=False),
    sa.ForeignKeyConstraint(['cpm_id'], ['fppa04_cpm.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_fppa04_cpm_items_cpm_id'), 'fppa04_cpm_items', ['cpm_id'], unique=False)

    op.create_table('fppa04_cpm_adjustments',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('cpm_id', sa.Uuid(), nullable=False),
    sa.Column('position', sa.Integer(), nullable=False),
    sa.Column('type', _enum('adjustment_type', 'ADD', 'DEDUCT'), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('amount', sa.Numeric(precision=14, scale=2), nullable=False),
    sa.ForeignKeyConstraint(['cpm_id'], ['fppa04_cpm.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_fppa04_cpm_adjustments_cpm_id'), 'fppa04_cpm_adjustments', ['cpm_id'], unique=False)

    op.create_table('attachments',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('claim_id', sa.Uuid(), nullable=False),
    sa.Column('file_name', sa.String(), nullable=False),
    sa.Column('url', sa.String(), nullable=False),
    sa.Column('type', _enum('attachment_type', 'DAMAGE_IMAGE', 'ESTIMATE_DOC', 'OTHER_DOCUMENT', 'USER_CONFIRM_DOC'), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_attachments_claim_id'), 'attachments', ['claim_id'], unique=False)

    op.create_table('claim_status_events',
    sa.Column('id', sa.Uuid(), nullable=False),
    sa.Column('claim_id', sa.Uuid(), nullable=False),
    sa.Column('from_status', _enum('event_from_status', *CLAIM_STATUSES), nullable=True),
    sa.Column('to_status', _enum('event_to_status', *CLAIM_STATUSES), nullable=False),
    sa.Column('action', sa.String(length=32), nullable=False),
    sa.Column('actor_id', sa.Uuid(), nullable=True),
    sa.Column('comment', sa.Text(), nullable=True),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
    sa.ForeignKeyConstraint(['claim_id'], ['claims.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_claim_status_events_claim_id'), 'claim_status_events', ['claim_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_claim_status_events_claim_id'), table_name='claim_status_events')
    op.drop_table('claim_status_events')
    op.drop_index(op.f('ix_attachments_claim_id'), table_name='attachments')
    op.drop_table('attachments')
    op.drop_index(op.f('ix_fppa04_cpm_adjustments_cpm_id'), table_name='fppa04_cpm_adjustments')
    op.drop_table('fppa04_cpm_adjustments')
    op.drop_index(op.f('ix_fppa04_cpm_items_cpm_id'), table_name='fppa04_cpm_items')
    op.drop_table('fppa04_cpm_items')
    op.drop_table('fppa04_cpm')
    op.drop_table('fppa04_bases')
    op.drop_table('cpm_forms')
    op.drop_index(op.f('ix_claims_created_at'), table_name='claims')
    op.drop_index(op.f('ix_claims_created_by_id'), table_name='claims')
    op.drop_index(op.f('ix_claims_status'), table_name='claims')
    op.drop_table('claims')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
