from __future__ import annotations

import os

from tilemerge.api.models import GameConfig, GameCreateRequest, LossRule


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from e


def get_log_level() -> str:
    return os.environ.get("TILEMERGE_LOG_LEVEL", "INFO").upper()


def default_config() -> GameConfig:
    """Process-wide defaults for new sessions, read from the environment."""

    base = GameConfig()
    return GameConfig(
        width=_env_int("TILEMERGE_WIDTH", base.width),
        height=_env_int("TILEMERGE_HEIGHT", base.height),
        win_value=_env_int("TILEMERGE_WIN_VALUE", base.win_value),
        initial_spawns=_env_int("TILEMERGE_INITIAL_SPAWNS", base.initial_spawns),
        loss_rule=LossRule(os.environ.get("TILEMERGE_LOSS_RULE", base.loss_rule.value)),
    )


def config_from_request(payload: GameCreateRequest, *, defaults: GameConfig | None = None) -> GameConfig:
    defaults = defaults or default_config()
    overrides = payload.model_dump(exclude_none=True)
    return defaults.model_copy(update=overrides)
