"""Error taxonomy for match operations.

Every failure surfaced by the match services is a ``MatchError`` carrying an
HTTP status code and a kind; ``create_app`` renders them as JSON.
"""


class MatchError(Exception):
    status_code = 500
    kind = 'InternalError'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class NotFound(MatchError):
    status_code = 404
    kind = 'NotFound'


class Forbidden(MatchError):
    status_code = 403
    kind = 'Forbidden'


class InvalidTransition(MatchError):
    status_code = 400
    kind = 'InvalidTransition'


class InvalidAction(MatchError):
    status_code = 400
    kind = 'InvalidAction'


class InvalidPointType(MatchError):
    status_code = 400
    kind = 'InvalidPointType'


class InvalidRequest(MatchError):
    status_code = 400
    kind = 'InvalidRequest'


class InternalError(MatchError):
    status_code = 500
    kind = 'InternalError'
