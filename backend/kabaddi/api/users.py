from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from kabaddi import db
from kabaddi.errors import NotFound
from kabaddi.models import Match, MatchStats, PlayerStat, User
from kabaddi.services.matches.reconciler import reconcile_matches


users = Blueprint('users', __name__)

RECENT_MATCHES = 5


def _performance(points):
    if points >= 15:
        return 'excellent'
    if points >= 10:
        return 'good'
    if points < 5:
        return 'poor'
    return 'average'


def _result(view, team_number):
    """Won/Lost/Drawn from the stored team scores; None until the match is over."""
    if view['status'] != 'completed':
        return None
    own, other = view['team1_score'], view['team2_score']
    if team_number == 2:
        own, other = other, own
    if own == other:
        return 'Drawn'
    return 'Won' if own > other else 'Lost'


def _recent_match(row, view):
    stats = row.match_stats
    own, other = view['team1_score'], view['team2_score']
    if row.team == 2:
        own, other = other, own
    points = row.raid_points + row.tackle_points
    return {
        'match_id': stats.match_id,
        'date': view['match_date'][:10] if view['match_date'] else None,
        'status': view['status'],
        'opponent': stats.team2_name if row.team == 1 else stats.team1_name,
        'venue': view['venue'],
        'result': _result(view, row.team),
        'score': f'{own}-{other}',
        'player_points': points,
        'raid_points': row.raid_points,
        'tackle_points': row.tackle_points,
        'performance': _performance(points),
    }


def _player_rows(player_id):
    return (
        PlayerStat.query.filter_by(player_id=player_id)
        .join(PlayerStat.match_stats)
        .order_by(MatchStats.created_at.desc(), MatchStats.id.desc())
        .all()
    )


@users.route('/all', methods=['GET'])
def get_all_users():
    everyone = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify({
        'count': len(everyone),
        'users': [{'id': u.id, 'name': u.name} for u in everyone],
    })


@users.route('/user/<int:player_id>', methods=['GET'])
def get_user(player_id):
    user = db.session.get(User, player_id)
    if not user:
        raise NotFound('User not found')
    return jsonify({'user': user.to_dict()})


@users.route('/user/<int:player_id>/profile', methods=['GET'])
def get_user_profile(player_id):
    user = db.session.get(User, player_id)
    if not user:
        raise NotFound('User not found')

    rows = _player_rows(player_id)
    raid = sum(r.raid_points for r in rows)
    tackle = sum(r.tackle_points for r in rows)
    total = raid + tackle

    recent = rows[:RECENT_MATCHES]
    views = reconcile_matches([r.match_stats.match for r in recent])

    return jsonify({
        'id': user.id,
        'name': user.name,
        'photo': user.photo,
        'career_stats': {
            'total_matches': len(rows),
            'total_points': total,
            'raid_points': raid,
            'tackle_points': tackle,
            'average_points': round(total / len(rows), 1) if rows else 0,
            'raid_success_rate': round(raid / total * 100, 1) if total > 0 else 0,
        },
        'last_five_matches': [_recent_match(row, view) for row, view in zip(recent, views)],
    })


@users.route('/user/played-matches', methods=['GET'])
@login_required
def get_played_matches():
    played = (
        Match.query.join(Match.stats)
        .join(MatchStats.players)
        .filter(PlayerStat.player_id == current_user.id)
        .order_by(Match.created_at.desc(), Match.id.desc())
        .all()
    )
    return jsonify({'count': len(played), 'matches': reconcile_matches(played)})


@users.route('/user/created-matches', methods=['GET'])
@login_required
def get_created_matches():
    created = (
        Match.query.filter_by(created_by_id=current_user.id)
        .order_by(Match.created_at.desc(), Match.id.desc())
        .all()
    )
    return jsonify({'count': len(created), 'matches': reconcile_matches(created)})
