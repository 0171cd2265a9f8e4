"""initial_schema

Revision ID: a1c4e7f20b93
Revises:
Create Date: 2026-03-02 10:00:00.000000

초기 스키마: 조직, 직원, 근무조, 사용자, QR 토큰/화면, 출퇴근, 휴가, 알림, 환경설정.
Initial schema: organization, personnel, shifts, users, QR tokens and screens,
attendance, leave, notifications and preferences.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f20b93'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users — 로그인 계정과 역할/권한 (Accounts with role and explicit permissions)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), server_default='personnel', nullable=False),
        sa.Column('permissions', sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # branches / departments / teams — 조직 구조 (Organization structure)
    op.create_table(
        'branches',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'departments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('branch_id', 'name', name='uq_department_branch_name'),
    )
    op.create_table(
        'teams',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('branch_id', 'name', name='uq_team_branch_name'),
    )

    # shifts — 지점별 근무조 (Branch shifts)
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('branch_id', 'name', name='uq_shift_branch_name'),
    )

    # personnel — 직원 기록과 연차 원장 (Personnel with annual leave ledger)
    op.create_table(
        'personnel',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('department_id', UUID(as_uuid=True), sa.ForeignKey('departments.id', ondelete='SET NULL'), nullable=True),
        sa.Column('team_id', UUID(as_uuid=True), sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='SET NULL'), nullable=True),
        sa.Column('employee_number', sa.String(50), nullable=False, unique=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('annual_leave_entitlement', sa.Integer(), server_default='20', nullable=False),
        sa.Column('used_annual_leave', sa.Integer(), server_default='0', nullable=False),
        sa.Column('remaining_annual_leave', sa.Integer(), server_default='20', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_personnel_branch', 'personnel', ['branch_id'])

    op.create_table(
        'shift_assignments',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('personnel_id', UUID(as_uuid=True), sa.ForeignKey('personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('personnel_id', 'work_date', name='uq_shift_assignment_personnel_date'),
    )

    # qr_screens — 키오스크 화면과 디바이스 바인딩 (Kiosk screens with device binding)
    op.create_table(
        'qr_screens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('screen_id', sa.String(100), nullable=False, unique=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('access_code', sa.String(32), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('device_id', sa.String(100), nullable=True),
        sa.Column('last_activity', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # qr_codes — 단기 QR 토큰, 감사 기록으로 유지 (Short-lived tokens kept as audit trail)
    op.create_table(
        'qr_codes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('code', sa.String(64), nullable=False, unique=True),
        sa.Column('branch_id', UUID(as_uuid=True), sa.ForeignKey('branches.id', ondelete='CASCADE'), nullable=False),
        sa.Column('screen_id', UUID(as_uuid=True), sa.ForeignKey('qr_screens.id', ondelete='SET NULL'), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_qr_codes_screen_created', 'qr_codes', ['screen_id', 'created_at'])

    # attendance_records — 출퇴근 기록 (Check-in / check-out records)
    op.create_table(
        'attendance_records',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('personnel_id', UUID(as_uuid=True), sa.ForeignKey('personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('work_date', sa.Date(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('check_out_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('qr_code_id', UUID(as_uuid=True), sa.ForeignKey('qr_codes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('qr_screen_id', UUID(as_uuid=True), sa.ForeignKey('qr_screens.id', ondelete='SET NULL'), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default='present', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_attendance_records_personnel_date', 'attendance_records', ['personnel_id', 'work_date'])

    # leave_requests — 휴가 신청 (Leave requests)
    op.create_table(
        'leave_requests',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('personnel_id', UUID(as_uuid=True), sa.ForeignKey('personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leave_type', sa.String(20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('requested_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approved_by', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_leave_requests_status', 'leave_requests', ['status'])

    # notifications / notification_reads — 알림과 사용자별 읽음 (Notifications and per-user reads)
    op.create_table(
        'notifications',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(20), server_default='info', nullable=False),
        sa.Column('target_type', sa.String(20), server_default='all', nullable=False),
        sa.Column('target_id', UUID(as_uuid=True), nullable=True),
        sa.Column('sender_user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'notification_reads',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('notification_id', UUID(as_uuid=True), sa.ForeignKey('notifications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('notification_id', 'user_id', name='uq_notification_read_user'),
    )

    # user_preferences — 사용자별 UI 설정 (Per-user UI state)
    op.create_table(
        'user_preferences',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'key', name='uq_user_preference_key'),
    )


def downgrade() -> None:
    op.drop_table('user_preferences')
    op.drop_table('notification_reads')
    op.drop_table('notifications')
    op.drop_index('ix_leave_requests_status', table_name='leave_requests')
    op.drop_table('leave_requests')
    op.drop_index('ix_attendance_records_personnel_date', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.drop_index('ix_qr_codes_screen_created', table_name='qr_codes')
    op.drop_table('qr_codes')
    op.drop_table('qr_screens')
    op.drop_table('shift_assignments')
    op.drop_index('ix_personnel_branch', table_name='personnel')
    op.drop_table('personnel')
    op.drop_table('shifts')
    op.drop_table('teams')
    op.drop_table('departments')
    op.drop_table('branches')
    op.drop_table('users')
