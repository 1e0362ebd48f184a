import logging
from datetime import datetime, timedelta

import pytest

from kabaddi import db
from kabaddi.errors import Forbidden, InvalidAction, InvalidTransition, NotFound
from kabaddi.models import Match
from kabaddi.services.matches import lifecycle
from kabaddi.services.matches.lifecycle import apply_action
from kabaddi.services.matches.reconciler import reconcile_match


T0 = datetime(2030, 1, 1, 12, 0, 0)


def at(seconds):
    return T0 + timedelta(seconds=seconds)


def act(seeded, action, seconds):
    uid = seeded.creator.id
    return apply_action(seeded.match.id, action, uid, uid, now=at(seconds))


def test_new_match_starts_with_full_clock(seeded):
    match = db.session.get(Match, seeded.match.id)
    assert match.status == 'upcoming'
    assert match.remaining_duration == 2400
    assert match.match_start_time is None


def test_timer_expiry_scenario(seeded):
    match = act(seeded, 'start', 0)
    assert match.status == 'live'
    assert match.match_start_time == T0

    view, correction = reconcile_match(match, now=at(100))
    assert view['remaining_duration'] == 2300
    assert view['status'] == 'live'
    assert correction is None

    # Pausing exactly at expiry charges the clock but does not complete
    match = act(seeded, 'pause', 2400)
    assert match.remaining_duration == 0
    assert match.status == 'paused'
    assert match.match_pause_time == at(2400)

    match = act(seeded, 'end', 2500)
    assert match.status == 'completed'
    assert match.remaining_duration == 0


def test_segments_accumulate_across_pause_and_resume(seeded):
    act(seeded, 'start', 0)
    match = act(seeded, 'pause', 100)
    assert match.remaining_duration == 2300

    match = act(seeded, 'resume', 200)
    assert match.status == 'live'
    assert match.match_start_time == at(200)
    # Pause history is kept across resume
    assert match.match_pause_time == at(100)
    # Stored value stays as of the segment start while live
    assert match.remaining_duration == 2300

    match = act(seeded, 'pause', 250)
    assert match.remaining_duration == 2250


def test_end_from_live_zeroes_clock(seeded, caplog):
    caplog.set_level(logging.INFO)
    act(seeded, 'start', 0)
    match = act(seeded, 'end', 60)
    assert f"[match-end] match={seeded.match.id} clock_at_end=2340s" in caplog.text
    assert match.status == 'completed'
    assert match.remaining_duration == 0
    assert match.match_pause_time == at(60)


def test_end_from_paused_zeroes_clock(seeded, caplog):
    caplog.set_level(logging.INFO)
    act(seeded, 'start', 0)
    act(seeded, 'pause', 30)
    match = act(seeded, 'end', 40)
    assert f"[match-end] match={seeded.match.id} clock_at_end=2370s" in caplog.text
    assert match.status == 'completed'
    assert match.remaining_duration == 0


@pytest.mark.parametrize('setup, action', [
    ([], 'pause'),
    ([], 'resume'),
    ([], 'end'),
    (['start'], 'start'),
    (['start'], 'resume'),
    (['start', 'pause'], 'pause'),
    (['start', 'pause'], 'start'),
    (['start', 'end'], 'start'),
    (['start', 'end'], 'resume'),
    (['start', 'end'], 'end'),
])
def test_invalid_transitions_do_not_mutate(seeded, setup, action):
    for i, step in enumerate(setup):
        act(seeded, step, i * 10)
    before = db.session.get(Match, seeded.match.id).to_dict()

    with pytest.raises(InvalidTransition):
        act(seeded, action, 500)

    db.session.expire_all()
    assert db.session.get(Match, seeded.match.id).to_dict() == before


def test_unknown_action_rejected_before_lookup(seeded):
    with pytest.raises(InvalidAction):
        apply_action(999999, 'rewind', seeded.creator.id, seeded.creator.id)


def test_missing_match(seeded):
    with pytest.raises(NotFound):
        apply_action(999999, 'start', seeded.creator.id, seeded.creator.id)


def test_non_creator_is_forbidden(seeded):
    uid = seeded.outsider.id
    with pytest.raises(Forbidden):
        apply_action(seeded.match.id, 'start', uid, uid, now=T0)
    assert db.session.get(Match, seeded.match.id).status == 'upcoming'


def test_acting_user_must_match_session_user(seeded):
    with pytest.raises(Forbidden):
        apply_action(seeded.match.id, 'start', seeded.creator.id, seeded.outsider.id, now=T0)


def test_legacy_policy_accepts_either_identity(flask_app, seeded):
    flask_app.config['MATCH_CONTROL_POLICY'] = 'legacy'
    uid = seeded.outsider.id
    match = apply_action(seeded.match.id, 'start', uid, uid, now=T0)
    assert match.status == 'live'


def test_each_transition_broadcasts_once(seeded, monkeypatch):
    calls = []
    monkeypatch.setattr(lifecycle, 'broadcast_match', lambda match, now=None: calls.append((match.id, match.status)))

    act(seeded, 'start', 0)
    act(seeded, 'pause', 10)
    with pytest.raises(InvalidTransition):
        act(seeded, 'pause', 20)

    assert calls == [(seeded.match.id, 'live'), (seeded.match.id, 'paused')]
