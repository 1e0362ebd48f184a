"""Self-healing reads for the match clock.

There is no timer process: a live match whose budget ran out is only noticed
when somebody reads it. Every read path runs matches through here, serves the
corrected values straight away and writes the completion back out of band.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from kabaddi import db, socketio
from kabaddi.models import Match
from . import clock
from .realtime import broadcast_match


@dataclass(frozen=True)
class Correction:
    match_id: int
    observed_status: str
    observed_start_time: Optional[datetime]


def reconcile_match(match: Match, now=None):
    """Return (view dict, Correction or None) for one stored match."""
    view = match.to_dict()
    status, remaining, needs_persist = clock.project_status(
        match.status, match.remaining_duration, match.match_start_time, now or clock.utcnow()
    )
    view['status'] = status
    view['remaining_duration'] = remaining
    correction = None
    if needs_persist:
        correction = Correction(match.id, match.status, match.match_start_time)
    return view, correction


def reconciled_view(match: Match, now=None) -> dict:
    view, correction = reconcile_match(match, now=now)
    if correction:
        persist_corrections([correction])
    return view


def reconcile_matches(matches: Iterable[Match], now=None) -> List[dict]:
    now = now or clock.utcnow()
    views, corrections = [], []
    for match in matches:
        view, correction = reconcile_match(match, now=now)
        views.append(view)
        if correction:
            corrections.append(correction)
    if corrections:
        persist_corrections(corrections)
    return views


def heal_stale(now=None) -> int:
    """Write completions for stored matches whose clock already ran out.

    Runs inline, so a query filtering on the stored status straight after
    agrees with what the reconciled views will report.
    """
    now = now or clock.utcnow()
    candidates = Match.query.filter(
        Match.status != 'completed',
        or_(Match.status == 'live', Match.remaining_duration < 0),
    ).all()
    corrections = []
    for match in candidates:
        _, correction = reconcile_match(match, now=now)
        if correction:
            corrections.append(correction)
    if corrections:
        _persist(corrections)
    return len(corrections)


def _apply_correction(correction: Correction) -> bool:
    # Only rewrite rows still in the state we observed
    conditions = [Match.id == correction.match_id, Match.status == correction.observed_status]
    if correction.observed_status == 'live':
        conditions.append(Match.match_start_time == correction.observed_start_time)
    else:
        conditions.append(Match.remaining_duration < 0)
    result = db.session.execute(
        update(Match)
        .where(*conditions)
        .values(status='completed', remaining_duration=0)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    return result.rowcount == 1


def _persist(corrections: List[Correction]) -> None:
    healed = []
    for correction in corrections:
        try:
            if _apply_correction(correction):
                healed.append(correction.match_id)
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"[self-heal] match={correction.match_id} could not persist correction")
    for match_id in healed:
        match = db.session.get(Match, match_id)
        if match:
            current_app.logger.info(f"[self-heal] match={match_id} marked completed")
            broadcast_match(match)


def _run_in_context(app, corrections: List[Correction]) -> None:
    with app.app_context():
        _persist(corrections)


def persist_corrections(corrections: List[Correction]) -> None:
    """Write completions back without holding up the response.

    Runs inline under TESTING; otherwise as a Socket.IO background task.
    """
    app = current_app._get_current_object()
    if app.config.get('TESTING'):
        _persist(corrections)
    else:
        socketio.start_background_task(_run_in_context, app, list(corrections))
