"""Create SkillSync schema

Revision ID: initial_001
Revises:
Create Date: 2026-10-19

Creates tables for:
- users: Employee accounts, profiles and access rights
- skills / user_skills: Skill catalogue and per-user levels
- challenges / ideas: Challenge and idea boards
- matches: Persisted matching results
- messages: Direct and group messages
- notification_logs / access_logs / sync_logs: Audit trails
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Users
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('employee_id', sa.String(50), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('department', sa.String(255), nullable=True),
        sa.Column('position', sa.String(255), nullable=True),
        sa.Column('hire_date', sa.String(10), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='member'),
        sa.Column('profile_data', sa.JSON(), nullable=False),
        sa.Column('access_rights', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_employee_id', 'users', ['employee_id'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_department', 'users', ['department'])

    # Skills
    op.create_table(
        'skills',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_skills_name', 'skills', ['name'], unique=True)
    op.create_index('ix_skills_category', 'skills', ['category'])

    op.create_table(
        'user_skills',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('skill_id', sa.String(36), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('years_of_experience', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'skill_id', name='uq_user_skill')
    )
    op.create_index('ix_user_skills_user_id', 'user_skills', ['user_id'])
    op.create_index('ix_user_skills_skill_id', 'user_skills', ['skill_id'])
    op.create_index('ix_user_skills_updated_at', 'user_skills', ['updated_at'])

    # Challenge and idea boards
    op.create_table(
        'challenges',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='not_started'),
        sa.Column('posted_by', sa.String(36), nullable=True),
        sa.Column('required_skills', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['posted_by'], ['users.id'], ondelete='SET NULL')
    )
    op.create_index('ix_challenges_status', 'challenges', ['status'])
    op.create_index('ix_challenges_posted_by', 'challenges', ['posted_by'])
    op.create_index('ix_challenges_created_at', 'challenges', ['created_at'])

    op.create_table(
        'ideas',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('posted_by', sa.String(36), nullable=True),
        sa.Column('required_resources', sa.JSON(), nullable=False),
        sa.Column('evaluation_data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['posted_by'], ['users.id'], ondelete='SET NULL')
    )
    op.create_index('ix_ideas_posted_by', 'ideas', ['posted_by'])
    op.create_index('ix_ideas_created_at', 'ideas', ['created_at'])

    # Matching results
    op.create_table(
        'matches',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('target_type', sa.String(50), nullable=True),
        sa.Column('target_id', sa.String(36), nullable=True),
        sa.Column('match_score', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE')
    )
    op.create_index('ix_matches_user_id', 'matches', ['user_id'])
    op.create_index('ix_matches_created_at', 'matches', ['created_at'])
    op.create_index('idx_match_target', 'matches', ['target_type', 'target_id'])

    # Messages
    op.create_table(
        'messages',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('sender_id', sa.String(36), nullable=False),
        sa.Column('receiver_id', sa.String(36), nullable=True),
        sa.Column('group_id', sa.String(100), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE')
    )
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])
    op.create_index('ix_messages_group_id', 'messages', ['group_id'])
    op.create_index('ix_messages_sent_at', 'messages', ['sent_at'])

    # Audit trails
    op.create_table(
        'notification_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('error_detail', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE')
    )
    op.create_index('ix_notification_logs_user_id', 'notification_logs', ['user_id'])

    op.create_table(
        'access_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('access_type', sa.JSON(), nullable=False),
        sa.Column('granted', sa.Boolean(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE')
    )
    op.create_index('ix_access_logs_user_id', 'access_logs', ['user_id'])

    op.create_table(
        'sync_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('operation', sa.String(50), nullable=False, server_default='sync'),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('sync_logs')

    op.drop_index('ix_access_logs_user_id', table_name='access_logs')
    op.drop_table('access_logs')

    op.drop_index('ix_notification_logs_user_id', table_name='notification_logs')
    op.drop_table('notification_logs')

    op.drop_index('ix_messages_sent_at', table_name='messages')
    op.drop_index('ix_messages_group_id', table_name='messages')
    op.drop_index('ix_messages_receiver_id', table_name='messages')
    op.drop_index('ix_messages_sender_id', table_name='messages')
    op.drop_table('messages')

    op.drop_index('idx_match_target', table_name='matches')
    op.drop_index('ix_matches_created_at', table_name='matches')
    op.drop_index('ix_matches_user_id', table_name='matches')
    op.drop_table('matches')

    op.drop_index('ix_ideas_created_at', table_name='ideas')
    op.drop_index('ix_ideas_posted_by', table_name='ideas')
    op.drop_table('ideas')

    op.drop_index('ix_challenges_created_at', table_name='challenges')
    op.drop_index('ix_challenges_posted_by', table_name='challenges')
    op.drop_index('ix_challenges_status', table_name='challenges')
    op.drop_table('challenges')

    op.drop_index('ix_user_skills_updated_at', table_name='user_skills')
    op.drop_index('ix_user_skills_skill_id', table_name='user_skills')
    op.drop_index('ix_user_skills_user_id', table_name='user_skills')
    op.drop_table('user_skills')

    op.drop_index('ix_skills_category', table_name='skills')
    op.drop_index('ix_skills_name', table_name='skills')
    op.drop_table('skills')

    op.drop_index('ix_users_department', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_employee_id', table_name='users')
    op.drop_table('users')
