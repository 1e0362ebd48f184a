"""Who may drive a match.

Two identities reach the match endpoints: the logged-in session user and the
acting user id in the URL. ``MATCH_CONTROL_POLICY`` picks how they are
combined:

- ``creator``: the session user must be the URL user and the match creator.
- ``legacy``: transitions pass when the URL user is the creator or equals
  the session user; score updates pass when the URL user is the creator.
"""

from flask import current_app

from kabaddi.errors import Forbidden


POLICIES = ('creator', 'legacy')


def _policy() -> str:
    policy = current_app.config.get('MATCH_CONTROL_POLICY', 'creator')
    if policy not in POLICIES:
        raise ValueError(f"Unknown MATCH_CONTROL_POLICY: {policy!r}")
    return policy


def _is_creator_session(match, acting_user_id, session_user_id) -> bool:
    return session_user_id is not None and acting_user_id == session_user_id and match.created_by_id == session_user_id


def authorize_transition(match, acting_user_id, session_user_id) -> None:
    if _policy() == 'legacy':
        allowed = match.created_by_id == acting_user_id or session_user_id == acting_user_id
    else:
        allowed = _is_creator_session(match, acting_user_id, session_user_id)
    if not allowed:
        raise Forbidden('Not authorized to update this match')


def authorize_scoring(match, acting_user_id, session_user_id) -> None:
    if _policy() == 'legacy':
        allowed = match.created_by_id == acting_user_id
    else:
        allowed = _is_creator_session(match, acting_user_id, session_user_id)
    if not allowed:
        raise Forbidden('Not authorized to update these match stats')
