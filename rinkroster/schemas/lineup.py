from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_validator


def _clean_ids(group: List[str]) -> List[str]:
    for pid in group:
        if not pid or not pid.strip():
            raise ValueError("player ids must be non-empty strings")
    return group


class LineupConfig(BaseModel):
    """
    On-ice units for one game. Only the shape is checked here; whether the
    listed players are actually rostered is an opt-in check in the service.
    """
    model_config = ConfigDict(extra="forbid")

    forward_lines: Optional[List[List[str]]] = None  # [[C, LW, RW], ...]
    defense_pairs: Optional[List[List[str]]] = None  # [[LD, RD], ...]
    goalies: Optional[List[str]] = None              # [G1, G2]

    @field_validator("forward_lines", "defense_pairs")
    @classmethod
    def _groups(cls, v):
        if v is None:
            return v
        for group in v:
            if not group:
                raise ValueError("groups must contain at least one player id")
            _clean_ids(group)
        return v

    @field_validator("goalies")
    @classmethod
    def _goalies(cls, v):
        return v if v is None else _clean_ids(v)

    def player_ids(self) -> List[str]:
        ids: List[str] = []
        for group in (self.forward_lines or []) + (self.defense_pairs or []):
            ids.extend(group)
        ids.extend(self.goalies or [])
        return ids
