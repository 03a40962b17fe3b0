from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from rinkroster.core.config import settings
from rinkroster.core.errors import ValidationError
from rinkroster.db.models import GameRoster, Lineup
from rinkroster.schemas.lineup import LineupConfig
from rinkroster.services.games import get_game_row

logger = logging.getLogger(__name__)


def _coerce(config: Union[LineupConfig, Dict[str, Any]]) -> LineupConfig:
    if isinstance(config, LineupConfig):
        return config
    try:
        return LineupConfig.model_validate(config)
    except PydanticValidationError as exc:
        raise ValidationError(f"Malformed lineup: {exc.errors()[0].get('msg', 'invalid structure')}") from exc


def set_lineup(
    db: Session,
    game_id: str,
    config: Union[LineupConfig, Dict[str, Any]],
    require_rostered: Optional[bool] = None,
) -> LineupConfig:
    """
    Create or replace the game's lineup. Only the structure is validated
    unless ``require_rostered`` (default: the LINEUP_REQUIRE_ROSTERED
    setting) asks for every listed player to be on the roster.
    """
    cfg = _coerce(config)
    game = get_game_row(db, game_id)

    strict = settings.LINEUP_REQUIRE_ROSTERED if require_rostered is None else require_rostered
    if strict:
        rostered = set(
            db.execute(select(GameRoster.player_id).where(GameRoster.game_id == game.id)).scalars()
        )
        missing = sorted({pid for pid in cfg.player_ids() if pid not in rostered})
        if missing:
            raise ValidationError(f"Lineup lists players not on the roster: {', '.join(missing)}")

    payload = cfg.model_dump_json(exclude_none=True)
    lineup = db.execute(select(Lineup).where(Lineup.game_id == game.id)).scalar_one_or_none()
    if lineup is None:
        db.add(Lineup(game_id=game.id, configuration=payload))
    else:
        lineup.configuration = payload
    db.commit()
    logger.info("lineup saved game=%s", game.id)
    return cfg


def get_lineup(db: Session, game_id: str) -> Optional[LineupConfig]:
    lineup = db.execute(select(Lineup).where(Lineup.game_id == game_id)).scalar_one_or_none()
    if lineup is None:
        return None
    return LineupConfig.model_validate(json.loads(lineup.configuration))
