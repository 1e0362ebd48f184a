from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from kabaddi.errors import NotFound
from kabaddi.models import MatchStats
from kabaddi.services.matches.ledger import apply_score_event
from kabaddi.services.matches.reconciler import reconciled_view


match_stats = Blueprint('match_stats', __name__)
scorecard = Blueprint('scorecard', __name__)


def _load_stats(match_id) -> MatchStats:
    stats = MatchStats.query.filter_by(match_id=match_id).first()
    if not stats:
        raise NotFound('Match stats not found')
    return stats


def _full_stats(match_id):
    stats = _load_stats(match_id)
    match_view = reconciled_view(stats.match)
    return stats.to_dict(match=match_view)


@match_stats.route('/match/scorecard/<int:match_id>', methods=['GET'])
def get_full_match_stats(match_id):
    return jsonify(_full_stats(match_id))


@match_stats.route('/match/livescorecard/<int:match_id>', methods=['GET'])
@login_required
def get_live_scorecard(match_id):
    return jsonify(_full_stats(match_id))


@match_stats.route('/match/<int:match_id>/update/<int:current_user_id>', methods=['PUT'])
@login_required
def update_match_stats(match_id, current_user_id):
    stats = apply_score_event(match_id, current_user_id, current_user.id, request.get_json(silent=True))
    return jsonify(stats.to_dict(match=reconciled_view(stats.match)))


@scorecard.route('/<int:match_id>', methods=['GET'])
def get_scorecard_summary(match_id):
    stats = _load_stats(match_id)
    match_view = reconciled_view(stats.match)
    return jsonify({
        'match': match_view,
        'team1_name': stats.team1_name,
        'team2_name': stats.team2_name,
        'team1_stats': stats.team_totals(1),
        'team2_stats': stats.team_totals(2),
    })
