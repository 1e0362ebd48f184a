from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from kabaddi import db
from kabaddi.errors import InternalError, InvalidAction, InvalidTransition, NotFound
from kabaddi.models import Match
from . import clock
from .access import authorize_transition
from .realtime import broadcast_match


ACTIONS = ('start', 'pause', 'resume', 'end')


def plan_transition(match: Match, action: str, now) -> dict:
    """Compute the column updates for ``action`` without touching the row.

    Pipeline: upcoming -> live <-> paused -> completed. Raises
    InvalidTransition when the match is not in a state the action accepts.
    """
    status = match.status
    if action == 'start':
        if status != 'upcoming':
            raise InvalidTransition('Match must be upcoming to start')
        return {'status': 'live', 'match_start_time': now}

    if action == 'pause':
        if status != 'live':
            raise InvalidTransition('Match must be live to be paused')
        # Charge the segment that just ended; a pause at expiry stays paused
        return {
            'status': 'paused',
            'match_pause_time': now,
            'remaining_duration': clock.consume_segment(match.remaining_duration, match.match_start_time, now),
        }

    if action == 'resume':
        if status != 'paused':
            raise InvalidTransition('Match must be paused to be resumed')
        return {'status': 'live', 'match_start_time': now}

    if action == 'end':
        if status not in ('live', 'paused'):
            raise InvalidTransition('Match must be live or paused to be ended')
        current_app.logger.info(
            f"[match-end] match={match.id} clock_at_end="
            f"{clock.consume_segment(match.remaining_duration, match.match_start_time, now) if status == 'live' else match.remaining_duration}s"
        )
        # Ending always zeroes the clock
        return {'status': 'completed', 'match_pause_time': now, 'remaining_duration': 0}

    raise InvalidAction('Invalid action type. Must be start, pause, resume, or end')


def apply_action(match_id: int, action: str, acting_user_id, session_user_id, now=None) -> Match:
    """Run one lifecycle action and broadcast the resulting snapshot."""
    if action not in ACTIONS:
        raise InvalidAction('Invalid action type. Must be start, pause, resume, or end')

    match = db.session.get(Match, match_id)
    if not match:
        raise NotFound('Match not found')

    authorize_transition(match, acting_user_id, session_user_id)

    now = now or clock.utcnow()
    prev_status = match.status
    changes = plan_transition(match, action, now)

    try:
        # Conditional on the observed status so two racing actions cannot both apply
        result = db.session.execute(
            update(Match)
            .where(Match.id == match.id, Match.status == prev_status)
            .values(**changes)
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise InvalidTransition('Match status changed while the action was being applied')
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"[match-action] match={match_id} action={action} failed")
        raise InternalError('Error updating match status') from exc

    db.session.refresh(match)
    current_app.logger.info(
        f"[match-action] match={match.id} action={action} {prev_status} -> {match.status} remaining={match.remaining_duration}"
    )
    broadcast_match(match, now=now)
    return match
