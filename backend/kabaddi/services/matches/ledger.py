from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from kabaddi import db
from kabaddi.errors import InternalError, InvalidPointType, InvalidRequest, NotFound
from kabaddi.models import Commentary, Match, MatchStats, PlayerStat
from . import clock
from .access import authorize_scoring
from .realtime import broadcast_match, emit_new_commentary


PLAYER_POINT_FIELDS = {
    'RAID_POINT': 'raid_points',
    'TACKLE_POINT': 'tackle_points',
}
TEAM_POINT_TYPES = ('BONUS_POINT', 'TECHNICAL_POINT', 'ALL_OUT_POINT')
POINT_TYPES = tuple(PLAYER_POINT_FIELDS) + TEAM_POINT_TYPES

COMMENTARY_TEMPLATES = {
    'RAID_POINT': '{team} scored raid points by player {player} {points} points.',
    'TACKLE_POINT': '{team} scored tackle points by player {player} {points} points.',
    'BONUS_POINT': '{team} scored a bonus point. +{points} points.',
    'TECHNICAL_POINT': '{team} awarded a technical point. +{points} points.',
    'ALL_OUT_POINT': '{team} scored an all-out point! +{points} points.',
}


@dataclass
class ScoreEvent:
    point_type: str
    points: int
    player_id: Optional[int] = None
    team_name: Optional[str] = None

    @classmethod
    def from_payload(cls, data):
        data = data or {}
        if not isinstance(data, dict):
            raise InvalidRequest('Request body must be a JSON object')
        point_type = data.get('point_type')
        points = data.get('points')
        if point_type is None or point_type == '':
            raise InvalidRequest('point_type is required')
        if isinstance(points, bool) or not isinstance(points, int):
            raise InvalidRequest('points must be an integer')
        player_id = data.get('player_id')
        if player_id is not None:
            try:
                player_id = int(player_id)
            except (TypeError, ValueError):
                raise InvalidRequest('player_id must be an integer')
        team_name = data.get('team_name')
        if team_name is not None and not isinstance(team_name, str):
            raise InvalidRequest('team_name must be a string')
        return cls(point_type=point_type, points=points, player_id=player_id, team_name=team_name)


def commentary_line(point_type: str, team_name: str, points: int, player_name: str = None) -> str:
    return COMMENTARY_TEMPLATES[point_type].format(team=team_name, player=player_name, points=points)


def _increment(model, row_id, field, points):
    """Atomic ``field = field + points`` on one row; False if it would go negative."""
    column = getattr(model, field)
    result = db.session.execute(
        update(model)
        .where(model.id == row_id, column + points >= 0)
        .values({field: column + points})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def apply_score_event(match_id: int, acting_user_id, session_user_id, event, now=None) -> MatchStats:
    """Apply one scoring event to the match, the player counters and the commentary log.

    ``event`` is a ScoreEvent or the raw request payload; a payload is only
    parsed once the match is found and the user may score it. Events are
    accepted in every match status so a finished match can still be corrected.

    All three writes share one transaction: either everything lands or the
    session is rolled back and the error surfaces.
    """
    stats = MatchStats.query.filter_by(match_id=match_id).first()
    if not stats:
        raise NotFound('Match stats not found')
    match = stats.match

    authorize_scoring(match, acting_user_id, session_user_id)

    if not isinstance(event, ScoreEvent):
        event = ScoreEvent.from_payload(event)
    if event.point_type not in POINT_TYPES:
        raise InvalidPointType('Invalid point type')

    # Resolve the player (team1 first, then team2), else the team by name
    player, team_number = (None, None)
    if event.player_id is not None:
        player, team_number = stats.find_player(event.player_id)
    score_field = f"team{team_number}_score" if player else None
    if not score_field and event.team_name:
        score_field = match.score_field_for(event.team_name)

    counter_field = PLAYER_POINT_FIELDS.get(event.point_type)
    if counter_field and not player:
        raise NotFound('Player not found in this match')
    if not score_field:
        raise InvalidRequest('Could not determine which team to award points to.')

    team_name = match.team1_name if score_field == 'team1_score' else match.team2_name
    player_name = player.player.name if player and player.player else None
    now = now or clock.utcnow()
    commentary = None

    try:
        if not _increment(Match, match.id, score_field, event.points):
            db.session.rollback()
            raise InvalidRequest('Team score cannot go below zero')
        if counter_field and not _increment(PlayerStat, player.id, counter_field, event.points):
            db.session.rollback()
            raise InvalidRequest('Player points cannot go below zero')
        if event.points > 0:
            commentary = Commentary(
                match_id=match.id,
                commentary=commentary_line(event.point_type, team_name, event.points, player_name),
                created_at=now,
            )
            db.session.add(commentary)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"[score] match={match_id} type={event.point_type} failed")
        raise InternalError('Error updating match stats') from exc

    current_app.logger.info(
        f"[score] match={match.id} type={event.point_type} points={event.points} "
        f"field={score_field} player={event.player_id if player else None}"
    )

    broadcast_match(match, now=now)
    if commentary is not None:
        emit_new_commentary(match.id, commentary.to_dict())

    return stats
