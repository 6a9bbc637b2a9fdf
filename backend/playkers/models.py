from playkers import db, bcrypt
from flask_login import UserMixin
from email_validator import EmailNotValidError, validate_email
from datetime import datetime, timezone
import secrets
import string
import uuid

SPORTS = ('cricket', 'football', 'volleyball', 'tennis', 'kabaddi')
MATCH_STATUSES = ('upcoming', 'live', 'paused', 'completed')
NOTIFICATION_TYPES = ('match_request', 'booking_request', 'booking_accepted')
NOTIFICATION_STATUSES = ('unread', 'read', 'accepted', 'declined')
INVITATION_TYPES = ('match', 'team')
INVITATION_STATUSES = ('pending', 'accepted', 'expired', 'revoked')
BOOKING_STATUSES = ('pending', 'confirmed', 'rejected')
CAREER_STAT_KEYS = (
    'totalMatches', 'matchesWon',
    'totalRuns', 'totalBallsFaced', 'totalFours', 'totalSixes', 'highestScore',
    'centuries', 'halfCenturies', 'innings', 'dismissals',
    'totalOvers', 'totalRunsGiven', 'totalWickets', 'totalMaidens', 'fiveWicketHauls',
    'manOfTheMatchAwards', 'bestBatsmanAwards', 'bestBowlerAwards', 'bestFielderAwards',
)


def is_valid_email(value):
    """Syntax check only; no DNS lookup for the domain."""
    if not isinstance(value, str) or not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def utcnow():
    """Naive UTC timestamp, the form SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id(prefix=None):
    """Generate an application-level document id, e.g. ``match-3f9c1a2b7d4e``."""
    suffix = uuid.uuid4().hex[:12]
    return f'{prefix}-{suffix}' if prefix else suffix


def generate_invitation_token(length=32):
    alphabet = string.ascii_letters + string.digits
    while True:
        token = ''.join(secrets.choice(alphabet) for _ in range(length))
        if not Invitation.query.filter_by(token=token).first():
            return token


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('user'))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    first_name = db.Column(db.String(64), nullable=True)
    last_name = db.Column(db.String(64), nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def display_name(self):
        parts = [p.strip() for p in (self.first_name, self.last_name) if p and p.strip()]
        if parts:
            return ' '.join(parts)
        if self.email:
            return self.email.split('@')[0]
        return f'User-{self.id[:6]}'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phoneNumber': self.phone_number,
            'isAdmin': self.is_admin,
        }


class Venue(db.Model):
    __tablename__ = 'venues'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('venue'))
    name = db.Column(db.String(128), nullable=False)
    city = db.Column(db.String(64), nullable=True)
    owner_id = db.Column(db.String(64), nullable=True, index=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'city': self.city, 'ownerId': self.owner_id}


class Player(db.Model):
    __tablename__ = 'players'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('player'))
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), nullable=True, index=True)
    user_id = db.Column(db.String(64), nullable=True, index=True)
    team_id = db.Column(db.String(64), nullable=True)
    role = db.Column(db.String(32), nullable=True)
    is_guest = db.Column(db.Boolean, default=False, nullable=False)
    # Running totals folded in by match completion
    career_stats = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'userId': self.user_id,
            'teamId': self.team_id,
            'role': self.role,
            'isGuest': self.is_guest,
            'careerStats': {key: (self.career_stats or {}).get(key, 0) for key in CAREER_STAT_KEYS},
        }


class Match(db.Model):
    __tablename__ = 'matches'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('match'))
    title = db.Column(db.String(200), nullable=False)
    sport = db.Column(db.String(32), nullable=False, index=True)
    match_type = db.Column(db.String(64), nullable=True)
    region = db.Column(db.String(64), nullable=True)
    venue_id = db.Column(db.String(64), nullable=True)
    organizer_id = db.Column(db.String(64), nullable=True)
    scheduled_at = db.Column(db.DateTime, nullable=True)
    max_players = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(32), default='upcoming', nullable=False)  # upcoming, live, paused, completed
    is_public = db.Column(db.Boolean, default=True, nullable=False)
    team1_name = db.Column(db.String(128), nullable=True)
    team2_name = db.Column(db.String(128), nullable=True)
    # Sport-dependent: int for most sports, {runs, wickets, overs} for cricket
    team1_score = db.Column(db.JSON, nullable=True)
    team2_score = db.Column(db.JSON, nullable=True)
    match_data = db.Column(db.JSON, nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'sport': self.sport,
            'matchType': self.match_type,
            'region': self.region,
            'venueId': self.venue_id,
            'organizerId': self.organizer_id,
            'scheduledAt': _iso(self.scheduled_at),
            'maxPlayers': self.max_players,
            'status': self.status,
            'isPublic': self.is_public,
            'team1Name': self.team1_name,
            'team2Name': self.team2_name,
            'team1Score': self.team1_score,
            'team2Score': self.team2_score,
            'matchData': self.match_data,
            'description': self.description,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class MatchParticipant(db.Model):
    __tablename__ = 'match_participants'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('participant'))
    match_id = db.Column(db.String(64), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    team = db.Column(db.String(32), nullable=True)
    role = db.Column(db.String(32), default='player', nullable=False)
    status = db.Column(db.String(32), default='joined', nullable=False)
    joined_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'matchId': self.match_id,
            'userId': self.user_id,
            'team': self.team,
            'role': self.role,
            'status': self.status,
            'joinedAt': _iso(self.joined_at),
        }


class PlayerPerformance(db.Model):
    __tablename__ = 'player_performances'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('perf'))
    match_id = db.Column(db.String(64), nullable=False, index=True)
    player_id = db.Column(db.String(64), nullable=False, index=True)
    team_id = db.Column(db.String(64), nullable=True)
    runs_scored = db.Column(db.Integer, default=0, nullable=False)
    balls_faced = db.Column(db.Integer, default=0, nullable=False)
    fours = db.Column(db.Integer, default=0, nullable=False)
    sixes = db.Column(db.Integer, default=0, nullable=False)
    is_out = db.Column(db.Boolean, default=False, nullable=False)
    dismissal_type = db.Column(db.String(32), nullable=True)
    overs_bowled = db.Column(db.Float, default=0, nullable=False)
    runs_given = db.Column(db.Integer, default=0, nullable=False)
    wickets_taken = db.Column(db.Integer, default=0, nullable=False)
    maidens = db.Column(db.Integer, default=0, nullable=False)
    man_of_match = db.Column(db.Boolean, default=False, nullable=False)
    best_batsman = db.Column(db.Boolean, default=False, nullable=False)
    best_bowler = db.Column(db.Boolean, default=False, nullable=False)
    best_fielder = db.Column(db.Boolean, default=False, nullable=False)
    is_winner = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'matchId': self.match_id,
            'playerId': self.player_id,
            'teamId': self.team_id,
            'runsScored': self.runs_scored,
            'ballsFaced': self.balls_faced,
            'fours': self.fours,
            'sixes': self.sixes,
            'isOut': self.is_out,
            'dismissalType': self.dismissal_type,
            'oversBowled': self.overs_bowled,
            'runsGiven': self.runs_given,
            'wicketsTaken': self.wickets_taken,
            'maidens': self.maidens,
            'manOfMatch': self.man_of_match,
            'bestBatsman': self.best_batsman,
            'bestBowler': self.best_bowler,
            'bestFielder': self.best_fielder,
            'isWinner': self.is_winner,
        }


class Booking(db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('booking'))
    user_id = db.Column(db.String(64), nullable=False, index=True)
    venue_id = db.Column(db.String(64), nullable=False, index=True)
    match_id = db.Column(db.String(64), nullable=True)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    total_amount = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(32), default='pending', nullable=False)  # pending, confirmed, rejected
    payment_status = db.Column(db.String(32), default='pending', nullable=False)
    booker_name = db.Column(db.String(128), nullable=True)
    booker_phone = db.Column(db.String(32), nullable=True)
    booker_email = db.Column(db.String(255), nullable=True)
    booker_place = db.Column(db.String(128), nullable=True)
    preferred_timing = db.Column(db.String(128), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'venueId': self.venue_id,
            'matchId': self.match_id,
            'startTime': _iso(self.start_time),
            'endTime': _iso(self.end_time),
            'totalAmount': self.total_amount,
            'status': self.status,
            'paymentStatus': self.payment_status,
            'bookerName': self.booker_name,
            'bookerPhone': self.booker_phone,
            'bookerEmail': self.booker_email,
            'bookerPlace': self.booker_place,
            'preferredTiming': self.preferred_timing,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Notification(db.Model):
    __tablename__ = 'notifications'
    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient_user_id = db.Column(db.String(64), nullable=True, index=True)
    recipient_player_id = db.Column(db.String(64), nullable=True)
    recipient_email = db.Column(db.String(255), nullable=True)
    sender_name = db.Column(db.String(128), nullable=False)
    sender_email = db.Column(db.String(255), nullable=False)
    sender_phone = db.Column(db.String(32), nullable=False)
    type = db.Column(db.String(32), default='match_request', nullable=False)
    status = db.Column(db.String(32), default='unread', nullable=False)  # unread, read, accepted, declined
    booking_id = db.Column(db.String(64), nullable=True)
    match_type = db.Column(db.String(64), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    sender_place = db.Column(db.String(128), nullable=True)
    preferred_timing = db.Column(db.String(128), nullable=True)
    team1_id = db.Column(db.String(64), nullable=True)
    team2_id = db.Column(db.String(64), nullable=True)
    sport = db.Column(db.String(32), nullable=True)
    message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    read_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'recipientUserId': self.recipient_user_id,
            'recipientPlayerId': self.recipient_player_id,
            'recipientEmail': self.recipient_email,
            'senderName': self.sender_name,
            'senderEmail': self.sender_email,
            'senderPhone': self.sender_phone,
            'type': self.type,
            'status': self.status,
            'bookingId': self.booking_id,
            'matchType': self.match_type,
            'location': self.location,
            'senderPlace': self.sender_place,
            'preferredTiming': self.preferred_timing,
            'team1Id': self.team1_id,
            'team2Id': self.team2_id,
            'sport': self.sport,
            'message': self.message,
            'createdAt': _iso(self.created_at),
            'readAt': _iso(self.read_at),
        }


class Invitation(db.Model):
    __tablename__ = 'invitations'
    id = db.Column(db.String(64), primary_key=True, default=lambda: generate_id('inv'))
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    inviter_name = db.Column(db.String(128), nullable=False, default='Unknown')
    inviter_id = db.Column(db.String(64), nullable=False, default='')
    invitation_type = db.Column(db.String(16), nullable=False)  # match, team
    match_type = db.Column(db.String(32), nullable=True)
    match_id = db.Column(db.String(64), nullable=True)
    team_id = db.Column(db.String(64), nullable=True)
    match_title = db.Column(db.String(200), nullable=True)
    team_name = db.Column(db.String(128), nullable=True)
    message = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), default='pending', nullable=False)  # pending, accepted, expired, revoked
    accepted_at = db.Column(db.DateTime, nullable=True)
    accepted_by_user_id = db.Column(db.String(64), nullable=True)
    accepted_by_player_id = db.Column(db.String(64), nullable=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    def __init__(self, **kwargs):
        super(Invitation, self).__init__(**kwargs)
        if not self.token:
            self.token = generate_invitation_token()

    @property
    def is_expired(self):
        return utcnow() > self.expires_at

    def to_dict(self):
        return {
            'id': self.id,
            'token': self.token,
            'email': self.email,
            'inviterName': self.inviter_name,
            'inviterId': self.inviter_id,
            'invitationType': self.invitation_type,
            'matchType': self.match_type,
            'matchId': self.match_id,
            'teamId': self.team_id,
            'matchTitle': self.match_title,
            'teamName': self.team_name,
            'message': self.message,
            'status': self.status,
            'acceptedAt': _iso(self.accepted_at),
            'acceptedByUserId': self.accepted_by_user_id,
            'acceptedByPlayerId': self.accepted_by_player_id,
            'expiresAt': _iso(self.expires_at),
            'createdAt': _iso(self.created_at),
        }
