from __future__ import annotations

import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _json(name: str) -> dict:
    value = _env(name)
    if not value:
        return {}
    return json.loads(value)


@dataclass(frozen=True)
class Settings:
    database_dsn: str
    hook_address: str
    logic_address: str
    pool_manager_address: str
    role_grants: dict
    yield_sources: dict
    global_max_adj_rate: int
    migration_slippage_tolerance_bps: int
    target_ratio_smoothing: str


def get_settings() -> Settings:
    return Settings(
        database_dsn=_env("DATABASE_DSN", ""),
        hook_address=_env("HOOK_ADDRESS", ""),
        logic_address=_env("LOGIC_ADDRESS", ""),
        pool_manager_address=_env("POOL_MANAGER_ADDRESS", ""),
        role_grants=_json("ROLE_GRANTS"),
        yield_sources=_json("YIELD_SOURCES"),
        global_max_adj_rate=int(_env("GLOBAL_MAX_ADJ_RATE", str(10**18))),
        migration_slippage_tolerance_bps=int(_env("MIGRATION_SLIPPAGE_TOLERANCE_BPS", "100")),
        target_ratio_smoothing=_env("TARGET_RATIO_SMOOTHING", "ema"),
    )
