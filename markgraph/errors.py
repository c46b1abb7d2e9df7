"""Error taxonomy shared by the concepts and the request dispatcher.

Every user-facing failure is a ``FormattableError`` carrying one of six kinds.
The kind alone decides the HTTP status; the message is rendered from a
template with positional ``{0}``, ``{1}``... placeholders.
"""

import re
from enum import Enum

_PLACEHOLDER = re.compile(r"{(\d+)}")


class ErrorKind(Enum):
    """Failure kinds. The value is the HTTP status code."""

    BAD_VALUES = 400
    UNAUTHENTICATED = 401
    NOT_ALLOWED = 403
    NOT_FOUND = 404
    WRONG_USER = 409
    DOES_NOT_EXIST = 410

    @property
    def status_code(self) -> int:
        return self.value


def render(template: str, *args: object) -> str:
    """Substitute positional arguments into ``template``.

    Placeholders without a matching argument are left as they are.
    """

    def substitute(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(args) and args[index] is not None:
            return str(args[index])
        return match.group(0)

    return _PLACEHOLDER.sub(substitute, template)


class FormattableError(Exception):
    """An error whose message is built from a template and positional arguments.

    Use ``format_with`` to get a copy of the error with the same class and
    template but different arguments, e.g. to replace user IDs with usernames
    before the message reaches a client::

        error = NotAllowedError("{0} is not the author of post {1}!", author, post_id)
        error.format_with(username, post_id)
    """

    kind: ErrorKind | None = None

    def __init__(self, template: str, *args: object) -> None:
        self.template = template
        self.format_args = args
        self.message = render(template, *args)
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code if self.kind else 500

    def format_with(self, *args: object) -> "FormattableError":
        # Subclass constructors take structured ids, not a template
        error = FormattableError.__new__(type(self))
        error.__dict__.update(self.__dict__)
        FormattableError.__init__(error, self.template, *args)
        return error


class BadValuesError(FormattableError):
    """Malformed or missing input (400)."""

    kind = ErrorKind.BAD_VALUES


class UnauthenticatedError(FormattableError):
    """The action requires a logged-in session (401)."""

    kind = ErrorKind.UNAUTHENTICATED


class NotAllowedError(FormattableError):
    """Authenticated but forbidden: wrong credentials or wrong state (403)."""

    kind = ErrorKind.NOT_ALLOWED


class NotFoundError(FormattableError):
    """A referenced entity is absent (404)."""

    kind = ErrorKind.NOT_FOUND


class WrongUserError(FormattableError):
    """The acting user does not own the entity (409)."""

    kind = ErrorKind.WRONG_USER


class DoesNotExistError(FormattableError):
    """A referenced sub-resource, such as a tag, is absent (410)."""

    kind = ErrorKind.DOES_NOT_EXIST
