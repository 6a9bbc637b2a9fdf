"""create playkers tables

Revision ID: 5b7e2d41c9a0
Revises:
Create Date: 2026-02-14 10:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b7e2d41c9a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa.inspect(bind).get_table_names())

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('first_name', sa.String(length=64), nullable=True),
            sa.Column('last_name', sa.String(length=64), nullable=True),
            sa.Column('phone_number', sa.String(length=32), nullable=True),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'venues' not in existing_tables:
        op.create_table(
            'venues',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('city', sa.String(length=64), nullable=True),
            sa.Column('owner_id', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_venues_owner_id', 'venues', ['owner_id'])

    if 'players' not in existing_tables:
        op.create_table(
            'players',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('user_id', sa.String(length=64), nullable=True),
            sa.Column('team_id', sa.String(length=64), nullable=True),
            sa.Column('role', sa.String(length=32), nullable=True),
            sa.Column('is_guest', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_players_email', 'players', ['email'])
        op.create_index('ix_players_user_id', 'players', ['user_id'])

    if 'matches' not in existing_tables:
        op.create_table(
            'matches',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('sport', sa.String(length=32), nullable=False),
            sa.Column('match_type', sa.String(length=64), nullable=True),
            sa.Column('region', sa.String(length=64), nullable=True),
            sa.Column('venue_id', sa.String(length=64), nullable=True),
            sa.Column('organizer_id', sa.String(length=64), nullable=True),
            sa.Column('scheduled_at', sa.DateTime(), nullable=True),
            sa.Column('max_players', sa.Integer(), nullable=True),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='upcoming'),
            sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('team1_name', sa.String(length=128), nullable=True),
            sa.Column('team2_name', sa.String(length=128), nullable=True),
            sa.Column('team1_score', sa.JSON(), nullable=True),
            sa.Column('team2_score', sa.JSON(), nullable=True),
            sa.Column('match_data', sa.JSON(), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_matches_sport', 'matches', ['sport'])

    if 'match_participants' not in existing_tables:
        op.create_table(
            'match_participants',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('match_id', sa.String(length=64), nullable=False),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('team', sa.String(length=32), nullable=True),
            sa.Column('role', sa.String(length=32), nullable=False, server_default='player'),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='joined'),
            sa.Column('joined_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_match_participants_match_id', 'match_participants', ['match_id'])
        op.create_index('ix_match_participants_user_id', 'match_participants', ['user_id'])

    if 'player_performances' not in existing_tables:
        op.create_table(
            'player_performances',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('match_id', sa.String(length=64), nullable=False),
            sa.Column('player_id', sa.String(length=64), nullable=False),
            sa.Column('team_id', sa.String(length=64), nullable=True),
            sa.Column('runs_scored', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('balls_faced', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('fours', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('sixes', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('is_out', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('dismissal_type', sa.String(length=32), nullable=True),
            sa.Column('overs_bowled', sa.Float(), nullable=False, server_default='0'),
            sa.Column('runs_given', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('wickets_taken', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('maidens', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('man_of_match', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('best_batsman', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('best_bowler', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('best_fielder', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_winner', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_player_performances_match_id', 'player_performances', ['match_id'])
        op.create_index('ix_player_performances_player_id', 'player_performances', ['player_id'])

    if 'bookings' not in existing_tables:
        op.create_table(
            'bookings',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('user_id', sa.String(length=64), nullable=False),
            sa.Column('venue_id', sa.String(length=64), nullable=False),
            sa.Column('match_id', sa.String(length=64), nullable=True),
            sa.Column('start_time', sa.DateTime(), nullable=False),
            sa.Column('end_time', sa.DateTime(), nullable=False),
            sa.Column('total_amount', sa.String(length=32), nullable=True),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
            sa.Column('payment_status', sa.String(length=32), nullable=False, server_default='pending'),
            sa.Column('booker_name', sa.String(length=128), nullable=True),
            sa.Column('booker_phone', sa.String(length=32), nullable=True),
            sa.Column('booker_email', sa.String(length=255), nullable=True),
            sa.Column('booker_place', sa.String(length=128), nullable=True),
            sa.Column('preferred_timing', sa.String(length=128), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
        op.create_index('ix_bookings_venue_id', 'bookings', ['venue_id'])

    if 'notifications' not in existing_tables:
        op.create_table(
            'notifications',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('recipient_user_id', sa.String(length=64), nullable=True),
            sa.Column('recipient_player_id', sa.String(length=64), nullable=True),
            sa.Column('recipient_email', sa.String(length=255), nullable=True),
            sa.Column('sender_name', sa.String(length=128), nullable=False),
            sa.Column('sender_email', sa.String(length=255), nullable=False),
            sa.Column('sender_phone', sa.String(length=32), nullable=False),
            sa.Column('type', sa.String(length=32), nullable=False, server_default='match_request'),
            sa.Column('status', sa.String(length=32), nullable=False, server_default='unread'),
            sa.Column('booking_id', sa.String(length=64), nullable=True),
            sa.Column('match_type', sa.String(length=64), nullable=True),
            sa.Column('location', sa.String(length=255), nullable=True),
            sa.Column('sender_place', sa.String(length=128), nullable=True),
            sa.Column('preferred_timing', sa.String(length=128), nullable=True),
            sa.Column('team1_id', sa.String(length=64), nullable=True),
            sa.Column('team2_id', sa.String(length=64), nullable=True),
            sa.Column('sport', sa.String(length=32), nullable=True),
            sa.Column('message', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('read_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_notifications_recipient_user_id', 'notifications', ['recipient_user_id'])

    if 'invitations' not in existing_tables:
        op.create_table(
            'invitations',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('token', sa.String(length=64), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('inviter_name', sa.String(length=128), nullable=False),
            sa.Column('inviter_id', sa.String(length=64), nullable=False),
            sa.Column('invitation_type', sa.String(length=16), nullable=False),
            sa.Column('match_type', sa.String(length=32), nullable=True),
            sa.Column('match_id', sa.String(length=64), nullable=True),
            sa.Column('team_id', sa.String(length=64), nullable=True),
            sa.Column('match_title', sa.String(length=200), nullable=True),
            sa.Column('team_name', sa.String(length=128), nullable=True),
            sa.Column('message', sa.Text(), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
            sa.Column('accepted_at', sa.DateTime(), nullable=True),
            sa.Column('accepted_by_user_id', sa.String(length=64), nullable=True),
            sa.Column('accepted_by_player_id', sa.String(length=64), nullable=True),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_invitations_token', 'invitations', ['token'], unique=True)
        op.create_index('ix_invitations_email', 'invitations', ['email'])


def downgrade():
    existing_tables = set(sa.inspect(op.get_bind()).get_table_names())
    for table in ('invitations', 'notifications', 'bookings', 'player_performances',
                  'match_participants', 'matches', 'players', 'venues', 'users'):
        if table in existing_tables:
            op.drop_table(table)
