from __future__ import annotations

from fastapi.requests import HTTPConnection

from playroom.protocol import SessionProtocol


def get_session(conn: HTTPConnection) -> SessionProtocol:
    """The session registry owned by the running application."""

    return conn.app.state.session
