import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; development by default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def weekend_days_from_env(default: str = "4,5") -> tuple:
    """Weekday numbers (Monday=0) from WEEKEND_DAYS, e.g. "4,5" for Friday and Saturday."""
    raw = os.getenv("WEEKEND_DAYS", default)
    return tuple(int(part) for part in raw.split(",") if part.strip())
