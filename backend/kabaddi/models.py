from kabaddi import db, bcrypt
from flask_login import UserMixin
from kabaddi.services.matches.clock import utcnow as _utcnow


MATCH_STATUSES = ('upcoming', 'live', 'paused', 'completed')


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    photo = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'photo': self.photo,
        }


class Match(db.Model):
    __tablename__ = 'match'
    id = db.Column(db.Integer, primary_key=True)
    team1_name = db.Column(db.String(50), nullable=False)
    team2_name = db.Column(db.String(50), nullable=False)
    team1_score = db.Column(db.Integer, default=0, nullable=False)
    team2_score = db.Column(db.Integer, default=0, nullable=False)
    team1_photo = db.Column(db.String(512), nullable=True)
    team2_photo = db.Column(db.String(512), nullable=True)
    status = db.Column(db.String(16), default='upcoming', nullable=False, index=True)  # upcoming, live, paused, completed
    match_date = db.Column(db.DateTime, nullable=False)
    venue = db.Column(db.String(100), nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    # Clock: total in minutes, remaining in seconds
    total_duration = db.Column(db.Integer, default=40, nullable=False)
    remaining_duration = db.Column(db.Integer, nullable=False)
    match_start_time = db.Column(db.DateTime, nullable=True)
    match_pause_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    created_by = db.relationship('User')
    stats = db.relationship('MatchStats', back_populates='match', uselist=False)

    def __init__(self, **kwargs):
        super(Match, self).__init__(**kwargs)
        if self.total_duration is None:
            self.total_duration = 40
        if self.remaining_duration is None:
            self.remaining_duration = self.total_duration * 60
        if self.status is None:
            self.status = 'upcoming'

    def score_field_for(self, team_name):
        """Map a stored team name to its score column name, or None."""
        if team_name == self.team1_name:
            return 'team1_score'
        if team_name == self.team2_name:
            return 'team2_score'
        return None

    def to_dict(self):
        creator = self.created_by
        return {
            'id': self.id,
            'team1_name': self.team1_name,
            'team2_name': self.team2_name,
            'team1_score': self.team1_score,
            'team2_score': self.team2_score,
            'team1_photo': self.team1_photo,
            'team2_photo': self.team2_photo,
            'status': self.status,
            'match_date': _iso(self.match_date),
            'venue': self.venue,
            'created_by': {'id': creator.id, 'name': creator.name, 'email': creator.email} if creator else None,
            'total_duration': self.total_duration,
            'remaining_duration': self.remaining_duration,
            'match_start_time': _iso(self.match_start_time),
            'match_pause_time': _iso(self.match_pause_time),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class MatchStats(db.Model):
    __tablename__ = 'match_stats'
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey('match.id'), unique=True, nullable=False)
    team1_name = db.Column(db.String(50), nullable=False)
    team2_name = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    match = db.relationship('Match', back_populates='stats')
    players = db.relationship(
        'PlayerStat',
        back_populates='match_stats',
        order_by='PlayerStat.position',
        cascade='all, delete-orphan',
    )

    @property
    def team1(self):
        return [p for p in self.players if p.team == 1]

    @property
    def team2(self):
        return [p for p in self.players if p.team == 2]

    def find_player(self, player_id):
        """Search team1 then team2; returns (player_stat, team_number) or (None, None)."""
        for team_number, roster in ((1, self.team1), (2, self.team2)):
            for p in roster:
                if p.player_id == player_id:
                    return p, team_number
        return None, None

    def team_totals(self, team_number):
        roster = self.team1 if team_number == 1 else self.team2
        raid = sum(p.raid_points for p in roster)
        tackle = sum(p.tackle_points for p in roster)
        return {
            'total_raid_points': raid,
            'total_tackle_points': tackle,
            'total_points': raid + tackle,
            'player_count': len(roster),
        }

    def to_dict(self, match=None):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'match': match if match is not None else (self.match.to_dict() if self.match else None),
            'team1_name': self.team1_name,
            'team2_name': self.team2_name,
            'team1': [p.to_dict() for p in self.team1],
            'team2': [p.to_dict() for p in self.team2],
        }


class PlayerStat(db.Model):
    __tablename__ = 'player_stat'
    __table_args__ = (
        db.UniqueConstraint('match_stats_id', 'player_id', name='uq_player_stat_match_player'),
    )
    id = db.Column(db.Integer, primary_key=True)
    match_stats_id = db.Column(db.Integer, db.ForeignKey('match_stats.id'), nullable=False, index=True)
    team = db.Column(db.Integer, nullable=False)  # 1 or 2
    position = db.Column(db.Integer, nullable=False, default=0)
    player_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    raid_points = db.Column(db.Integer, default=0, nullable=False)
    tackle_points = db.Column(db.Integer, default=0, nullable=False)

    match_stats = db.relationship('MatchStats', back_populates='players')
    player = db.relationship('User')

    def to_dict(self):
        return {
            'player_id': self.player_id,
            'name': self.player.name if self.player else None,
            'email': self.player.email if self.player else None,
            'photo': self.player.photo if self.player else None,
            'raid_points': self.raid_points,
            'tackle_points': self.tackle_points,
        }


class Commentary(db.Model):
    __tablename__ = 'commentary'
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey('match.id'), nullable=False, index=True)
    commentary = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'commentary': self.commentary,
            'created_at': _iso(self.created_at),
        }
