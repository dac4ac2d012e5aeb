"""
Household budget - configuration and constants

Values can be overridden with HOMEBUDGET_* environment variables.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from homebudget.periods import MONDAY, SUNDAY

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

_WEEK_STARTS = {"sunday": SUNDAY, "monday": MONDAY}


@dataclass(frozen=True)
class AppConfig:
    """Application settings."""
    currency: str = "PKR"
    data_path: Path = _PROJECT_ROOT / "data" / "store.json"
    refresh_interval: float = 30.0
    top_categories: int = 5
    daily_trend_days: int = 7
    weekly_trend_weeks: int = 5
    monthly_trend_months: int = 6
    date_tab_count: int = 5
    week_start: int = SUNDAY
    log_level: str = "INFO"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-integer %s=%r", name, raw)
        return default


def load_config() -> AppConfig:
    defaults = AppConfig()
    interval = os.getenv("HOMEBUDGET_REFRESH_INTERVAL")
    try:
        refresh_interval = float(interval) if interval else defaults.refresh_interval
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring bad HOMEBUDGET_REFRESH_INTERVAL=%r", interval)
        refresh_interval = defaults.refresh_interval
    return AppConfig(
        currency=os.getenv("HOMEBUDGET_CURRENCY", defaults.currency),
        data_path=Path(os.getenv("HOMEBUDGET_DATA_PATH", defaults.data_path)),
        refresh_interval=refresh_interval,
        top_categories=_env_int("HOMEBUDGET_TOP_CATEGORIES", defaults.top_categories),
        daily_trend_days=_env_int("HOMEBUDGET_DAILY_TREND_DAYS", defaults.daily_trend_days),
        weekly_trend_weeks=_env_int("HOMEBUDGET_WEEKLY_TREND_WEEKS", defaults.weekly_trend_weeks),
        monthly_trend_months=_env_int("HOMEBUDGET_MONTHLY_TREND_MONTHS", defaults.monthly_trend_months),
        date_tab_count=_env_int("HOMEBUDGET_DATE_TABS", defaults.date_tab_count),
        week_start=_WEEK_STARTS.get(os.getenv("HOMEBUDGET_WEEK_START", "sunday").lower(), SUNDAY),
        log_level=os.getenv("HOMEBUDGET_LOG_LEVEL", defaults.log_level).upper(),
    )


def configure_logging(cfg: AppConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_currency(amount: float, cfg: AppConfig = None) -> str:
    currency = (cfg or config).currency
    return f"{currency} {amount:.2f}"


# Global configuration instance
config = load_config()
