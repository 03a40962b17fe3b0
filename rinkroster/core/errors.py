# rinkroster/core/errors.py
"""
Business-rule errors raised by the service layer.

Each error carries the HTTP status the transport layer should answer with
and a stable ``code`` so clients can tell them apart without parsing text.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class RosterError(Exception):
    status_code: int = 400
    code: str = "roster_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class NotFoundError(RosterError):
    status_code = 404
    code = "not_found"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class RosterLockedError(RosterError):
    status_code = 423
    code = "roster_locked"

    def __init__(self, game_id: str):
        super().__init__("Roster is locked")
        self.game_id = game_id


class NotOnTeamError(RosterError):
    status_code = 400
    code = "not_on_team"

    def __init__(self, player_id: str, team_id: str):
        super().__init__("Player is not on this team")
        self.player_id = player_id
        self.team_id = team_id


class AlreadyRosteredError(RosterError):
    status_code = 409
    code = "already_rostered"

    def __init__(self, game_id: str, player_id: str):
        super().__init__("Player is already on the roster")
        self.game_id = game_id
        self.player_id = player_id


class ConflictError(RosterError):
    """Scheduling overlap (or a duplicate record). ``conflicts`` lists every affected player."""

    status_code = 409
    code = "conflict"

    def __init__(self, message: str, conflicts: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.conflicts = conflicts or []

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        if self.conflicts:
            out["conflicts"] = self.conflicts
        return out


class ValidationError(RosterError):
    status_code = 422
    code = "validation_error"
