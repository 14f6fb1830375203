"""baseline_hiring_schema

Revision ID: 5c1d7e2a9b40
Revises:
Create Date: 2026-10-19 10:12:44.118204

Creates users, companies, jobs and applications. Only missing tables are
created so the revision can be stamped onto databases built by create_all.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5c1d7e2a9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

APPLICATION_STATUSES = (
    'pending', 'shortlisted', 'interview_scheduled', 'interview_rescheduled',
    'interview_completed', 'rejected', 'hired',
)


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    return table_name in inspect(bind).get_table_names()


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('fullname', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('phone_number', sa.String(), nullable=True),
            sa.Column('password_hash', sa.String(), nullable=False),
            sa.Column('role', sa.Enum('applicant', 'employer', name='user_role'), nullable=False),
            sa.Column('resume_url', sa.String(), nullable=True),
            sa.Column('resume_original_name', sa.String(), nullable=True),
            sa.Column('bio', sa.Text(), nullable=True),
            sa.Column('skills', sa.JSON(), nullable=False),
            sa.Column('profile_photo_url', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    if not table_exists('companies'):
        op.create_table('companies',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('website', sa.String(), nullable=True),
            sa.Column('location', sa.String(), nullable=True),
            sa.Column('logo_url', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
        op.create_index(op.f('ix_companies_name'), 'companies', ['name'], unique=True)
        op.create_index(op.f('ix_companies_user_id'), 'companies', ['user_id'], unique=False)

    if not table_exists('jobs'):
        op.create_table('jobs',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('created_by', sa.Integer(), nullable=False),
            sa.Column('company_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('requirements', sa.JSON(), nullable=False),
            sa.Column('location', sa.String(), nullable=False),
            sa.Column('location_type', sa.String(), nullable=False),
            sa.Column('job_type', sa.String(), nullable=False),
            sa.Column('experience_level', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False),
            sa.Column('salary', sa.Float(), nullable=False),
            sa.Column('deadline', sa.DateTime(), nullable=False),
            sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('archived_at', sa.DateTime(), nullable=True),
            sa.Column('application_lock_activated_at', sa.DateTime(), nullable=True),
            sa.Column('core_requirements', sa.JSON(), nullable=False),
            sa.Column('locked_salary', sa.Float(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['company_id'], ['companies.id'], ),
            sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
        op.create_index(op.f('ix_jobs_created_by'), 'jobs', ['created_by'], unique=False)
        op.create_index(op.f('ix_jobs_company_id'), 'jobs', ['company_id'], unique=False)
        op.create_index(op.f('ix_jobs_created_at'), 'jobs', ['created_at'], unique=False)
        op.create_index('idx_jobs_archive_sweep', 'jobs', ['is_archived', 'deadline'], unique=False)
        op.create_index('idx_jobs_employer_created', 'jobs', ['created_by', 'created_at'], unique=False)

    if not table_exists('applications'):
        op.create_table('applications',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('job_id', sa.Integer(), nullable=True),
            sa.Column('applicant_id', sa.Integer(), nullable=False),
            sa.Column('status', sa.Enum(*APPLICATION_STATUSES, name='application_status'), nullable=False),
            sa.Column('interview_date', sa.DateTime(), nullable=True),
            sa.Column('interview_time', sa.String(), nullable=False),
            sa.Column('interview_mode', sa.Enum('online', 'onsite', name='interview_mode'), nullable=True),
            sa.Column('interview_location', sa.String(), nullable=False),
            sa.Column('interview_meeting_link', sa.String(), nullable=False),
            sa.Column('interview_notes', sa.Text(), nullable=False),
            sa.Column('version', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['applicant_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant')
        )
        op.create_index(op.f('ix_applications_id'), 'applications', ['id'], unique=False)
        op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'], unique=False)
        op.create_index(op.f('ix_applications_applicant_id'), 'applications', ['applicant_id'], unique=False)
        op.create_index(op.f('ix_applications_created_at'), 'applications', ['created_at'], unique=False)
        op.create_index('idx_applications_applicant_created', 'applications', ['applicant_id', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('applications')
    op.drop_table('jobs')
    op.drop_table('companies')
    op.drop_table('users')
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('application_status', 'interview_mode', 'user_role'):
            op.execute(f"DROP TYPE IF EXISTS {enum_name}")
