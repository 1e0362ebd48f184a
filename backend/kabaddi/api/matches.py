from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from kabaddi import db
from kabaddi.errors import InvalidRequest, NotFound
from kabaddi.models import MATCH_STATUSES, Commentary, Match, MatchStats, PlayerStat, User
from kabaddi.services.matches import clock
from kabaddi.services.matches.lifecycle import apply_action
from kabaddi.services.matches.reconciler import heal_stale, reconcile_matches, reconciled_view


matches = Blueprint('matches', __name__)


def _team_name(data, key):
    name = (data.get(key) or '').strip() if isinstance(data.get(key), str) else ''
    if not name:
        raise InvalidRequest(f'{key} is required')
    if len(name) > 50:
        raise InvalidRequest('Team name cannot exceed 50 characters')
    return name


def _parse_match_date(value):
    if not isinstance(value, str):
        raise InvalidRequest('Please provide a valid date')
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise InvalidRequest('Please provide a valid date')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if parsed < clock.utcnow():
        raise InvalidRequest('Match date cannot be in the past')
    return parsed


def _player_ids(data, key):
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise InvalidRequest(f'{key} must be a list of user ids')
    ids = []
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidRequest(f'{key} must be a list of user ids')
        ids.append(value)
    return ids


@matches.route('/all', methods=['GET'])
def list_matches():
    status = request.args.get('status')
    created_by = request.args.get('created_by', type=int)
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config.get('MATCHES_PAGE_SIZE', 10), type=int)
    if page < 1 or limit < 1:
        raise InvalidRequest('page and limit must be positive integers')
    if status and status not in MATCH_STATUSES:
        raise InvalidRequest('Status must be upcoming, live, paused, or completed')

    query = Match.query
    if status:
        # Stored statuses must be current before filtering on them
        heal_stale()
        query = query.filter_by(status=status)
    if created_by:
        query = query.filter_by(created_by_id=created_by)
    pagination = query.order_by(Match.created_at.desc(), Match.id.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return jsonify({
        'count': len(pagination.items),
        'total': pagination.total,
        'current_page': page,
        'total_pages': pagination.pages,
        'matches': reconcile_matches(pagination.items),
    })


@matches.route('/create', methods=['POST'])
@login_required
def create_match():
    data = request.get_json(silent=True) or {}
    team1_name = _team_name(data, 'team1_name')
    team2_name = _team_name(data, 'team2_name')
    if team1_name == team2_name:
        raise InvalidRequest('Team names must be different')
    venue = (data.get('venue') or '').strip() if isinstance(data.get('venue'), str) else ''
    if not venue:
        raise InvalidRequest('Venue is required')
    if len(venue) > 100:
        raise InvalidRequest('Venue cannot exceed 100 characters')
    match_date = _parse_match_date(data.get('match_date'))

    total_duration = data.get('total_duration')
    if total_duration is None:
        total_duration = current_app.config.get('DEFAULT_MATCH_DURATION_MIN', 40)
    if isinstance(total_duration, bool) or not isinstance(total_duration, int) or total_duration < 1:
        raise InvalidRequest('Total time must be at least 1 minute')

    team1_players = _player_ids(data, 'team1_players')
    team2_players = _player_ids(data, 'team2_players')
    all_players = team1_players + team2_players
    if len(set(all_players)) != len(all_players):
        raise InvalidRequest('A player can only appear once across both teams')
    if all_players:
        known = {u.id for u in User.query.filter(User.id.in_(all_players)).all()}
        missing = [pid for pid in all_players if pid not in known]
        if missing:
            raise InvalidRequest(f'Unknown player ids: {missing}')

    match = Match(
        team1_name=team1_name,
        team2_name=team2_name,
        team1_photo=data.get('team1_photo'),
        team2_photo=data.get('team2_photo'),
        match_date=match_date,
        venue=venue,
        total_duration=total_duration,
        remaining_duration=total_duration * 60,
        created_by_id=current_user.id,
        status='upcoming',
    )
    db.session.add(match)
    db.session.flush()

    stats = MatchStats(match_id=match.id, team1_name=team1_name, team2_name=team2_name)
    for team_number, roster in ((1, team1_players), (2, team2_players)):
        for position, player_id in enumerate(roster):
            stats.players.append(PlayerStat(team=team_number, position=position, player_id=player_id))
    db.session.add(stats)
    db.session.commit()

    current_app.logger.info(
        f"[match-create] match={match.id} by={current_user.id} duration={total_duration}min players={len(all_players)}"
    )
    return jsonify({
        'message': 'Match created successfully',
        'match': match.to_dict(),
        'stats': stats.to_dict(),
    }), 201


@matches.route('/<int:match_id>', methods=['GET'])
def get_match(match_id):
    match = db.session.get(Match, match_id)
    if not match:
        raise NotFound('Match not found')
    return jsonify(reconciled_view(match))


@matches.route('/match/<string:action_type>/<int:match_id>/<int:current_user_id>', methods=['PUT'])
@login_required
def update_match_status(action_type, match_id, current_user_id):
    match = apply_action(match_id, action_type, current_user_id, current_user.id)
    return jsonify({
        'message': f'Match status updated to {match.status}',
        'match': match.to_dict(),
    })


@matches.route('/<int:match_id>/commentary', methods=['GET'])
def get_commentary(match_id):
    if not db.session.get(Match, match_id):
        raise NotFound('Match not found')
    entries = (
        Commentary.query.filter_by(match_id=match_id)
        .order_by(Commentary.created_at.desc(), Commentary.id.desc())
        .all()
    )
    return jsonify({'commentary': [c.to_dict() for c in entries]})
