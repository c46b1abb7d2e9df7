from typing import Any, MutableMapping

from markgraph.errors import NotAllowedError, UnauthenticatedError

Session = MutableMapping[str, Any]


class SessioningConcept:
    """Logged-in / logged-out state kept on a caller-supplied session mapping.

    The session is the cookie-backed ``request.session`` in the web app and a
    plain dict in tests. A session is logged in iff it holds a ``user`` key.
    """

    def start(self, session: Session, user: str) -> None:
        self.is_logged_out(session)
        session["user"] = user

    def end(self, session: Session) -> None:
        self.is_logged_in(session)
        session.pop("user", None)

    def get_user(self, session: Session) -> str:
        self.is_logged_in(session)
        return session["user"]

    def is_logged_in(self, session: Session) -> None:
        if session.get("user") is None:
            raise UnauthenticatedError("Must be logged in!")

    def is_logged_out(self, session: Session) -> None:
        if session.get("user") is not None:
            raise NotAllowedError("Must be logged out!")
