"""Socket.IO broadcasts for match viewers.

Viewers join ``match:<id>`` rooms on the ``/ws`` namespace. Delivery is
best-effort to whoever is connected; there is no replay, late joiners read
current state over HTTP.
"""

from urllib.parse import quote_plus

from flask import current_app

from kabaddi import socketio
from kabaddi.models import Match, MatchStats
from . import clock


NAMESPACE = '/ws'
MATCH_LIST_ROOM = 'match-list'


def match_room(match_id) -> str:
    return f"match:{match_id}"


def _team_photo(name, photo):
    if photo:
        return photo
    return f"https://ui-avatars.com/api/?name={quote_plus(name or '')}&background=random"


def _roster(players):
    return [
        {
            'id': p.player_id,
            'name': p.player.name if p.player else None,
            'raid_points': p.raid_points,
            'tackle_points': p.tackle_points,
        }
        for p in players
    ]


def build_match_snapshot(match: Match, stats: MatchStats = None, now=None) -> dict:
    """Project a match and its stats into the payload pushed to viewers.

    The clock is shown as of ``now``; nothing is written back.
    """
    stats = stats if stats is not None else match.stats
    status, remaining, _ = clock.project_status(
        match.status, match.remaining_duration, match.match_start_time, now or clock.utcnow()
    )
    return {
        'id': match.id,
        'match_name': f"{match.team1_name} vs {match.team2_name}",
        'team1': {
            'name': match.team1_name,
            'photo': _team_photo(match.team1_name, match.team1_photo),
            'score': match.team1_score,
        },
        'team2': {
            'name': match.team2_name,
            'photo': _team_photo(match.team2_name, match.team2_photo),
            'score': match.team2_score,
        },
        'status': status.upper(),
        'remaining_duration': remaining,
        'venue': match.venue,
        'date': match.match_date.isoformat() if match.match_date else None,
        'players': {
            'team1': _roster(stats.team1) if stats else [],
            'team2': _roster(stats.team2) if stats else [],
        },
    }


def emit_match_updated(snapshot: dict) -> None:
    match_id = snapshot['id']
    socketio.emit('match_updated', snapshot, to=match_room(match_id), namespace=NAMESPACE)
    socketio.emit('match_list_should_refresh', {'match_id': match_id}, to=MATCH_LIST_ROOM, namespace=NAMESPACE)
    current_app.logger.info(
        f"[broadcast] match_updated match={match_id} status={snapshot['status']} remaining={snapshot['remaining_duration']}"
    )


def emit_new_commentary(match_id, commentary: dict) -> None:
    socketio.emit('new_commentary', commentary, to=match_room(match_id), namespace=NAMESPACE)
    current_app.logger.info(f"[broadcast] new_commentary match={match_id}")


def broadcast_match(match: Match, now=None) -> dict:
    """Re-read the match stats, build the snapshot and emit it once."""
    stats = MatchStats.query.filter_by(match_id=match.id).first()
    snapshot = build_match_snapshot(match, stats, now=now)
    emit_match_updated(snapshot)
    return snapshot
