from fastapi import Header, HTTPException, Query

from rinkroster.core.clock import Clock, system_clock


def get_player_id(
    player_id: str | None = Query(None, description="Responding player's id"),
    x_player_id: str | None = Header(None, alias="X-Player-Id"),
) -> str:
    pid = (player_id or x_player_id or "").strip()
    if not pid:
        raise HTTPException(
            status_code=400,
            detail="player_id is required (use ?player_id=<id> or header X-Player-Id: <id>)."
        )
    return pid


def get_clock() -> Clock:
    """Overridden in tests to pin 'now'."""
    return system_clock
