"""Signed-in user context for client code.

One ``SessionContext`` is created at start-up and handed to the client
services that need to know who is acting. The session file is read in
``load`` and written in ``persist``; nothing else touches it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ValidationError

from hrms.common.exceptions import UnauthorizedException
from hrms.config import settings

logger = logging.getLogger(__name__)


class SessionUser(BaseModel):
    """The signed-in user, as stored in the session file."""

    id: str
    username: str
    employee_id: str
    role: Optional[str] = None


class SessionContext:
    """Holds the current user and mirrors it to a JSON file."""

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path = Path(path or settings.SESSION_FILE).expanduser()
        self._user: Optional[SessionUser] = None

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "SessionContext":
        """Restore a session from disk; a missing or corrupt file means signed out."""
        ctx = cls(path)
        if not ctx.path.exists():
            return ctx
        try:
            ctx._user = SessionUser.model_validate_json(ctx.path.read_text(encoding="utf-8"))
        except ValidationError:
            logger.warning("Discarding invalid session file %s", ctx.path)
            ctx.path.unlink(missing_ok=True)
        return ctx

    # ── State ───────────────────────────────────────────────────────

    @property
    def current_user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def require_user(self) -> SessionUser:
        if self._user is None:
            raise UnauthorizedException()
        return self._user

    def require_employee_id(self) -> str:
        return self.require_user().employee_id

    # ── Changes ─────────────────────────────────────────────────────

    def sign_in(self, user: SessionUser, *, persist: bool = True) -> None:
        self._user = user
        logger.info("Signed in as %s (employee %s)", user.username, user.employee_id)
        if persist:
            self.persist()

    def sign_out(self) -> None:
        self._user = None
        self.path.unlink(missing_ok=True)
        logger.info("Signed out")

    def persist(self) -> None:
        """Write the current user to the session file (removing it when signed out)."""
        if self._user is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self._user.model_dump_json(), encoding="utf-8")
