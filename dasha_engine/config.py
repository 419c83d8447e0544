from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── App ──────────────────────────────
    APP_NAME: str = "dasha-engine"
    LOG_LEVEL: str = "INFO"

    # ─── Period engine ────────────────────
    MAX_CYCLES: int = 5
    DEFAULT_DEPTH: int = 3
    # Levels below this are listed in reports only along the running path
    FULL_TREE_DEPTH: int = 3

    # ─── Sandhi (junction) windows ────────
    # Share of the shorter adjacent period covered by the window, per level
    SANDHI_MAHADASHA_PCT: float = 0.05
    SANDHI_ANTARDASHA_PCT: float = 0.10
    SANDHI_PRATYANTARDASHA_PCT: float = 0.15
    SANDHI_MIN_HOURS: float = 1.0
    SANDHI_MAX_DAYS: float = 30.0
    SANDHI_LOOKAHEAD_DAYS: float = 180.0
    SANDHI_LOOKBACK_DAYS: float = 30.0
    # Upper bounds (days from boundary) for Critical, High, Moderate, Mild
    SANDHI_INTENSITY_DAYS: List[float] = [7.0, 30.0, 90.0, 180.0]

    # ─── Cache ────────────────────────────
    CACHE_MAX_ENTRIES: int = 128

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
