"""App settings, read from ``settings.ENROLLMENTS`` with defaults.

    ENROLLMENTS = {
        "MONTHLY_UNIT_PRICE": "90.00",
        "AVAILABLE_SECTIONS_CACHE_TTL": 60,
    }
"""

from decimal import Decimal

from django.conf import settings
from django.core.signals import setting_changed

DEFAULTS = {
    "MONTHLY_UNIT_PRICE": Decimal("90.00"),
    "SESSION_ENROLLMENT_FEE": Decimal("50.00"),
    "PRICE_TOLERANCE": Decimal("0.01"),
    "REQUEST_CODE_PREFIX": "SOL",
    "AVAILABLE_SECTIONS_CACHE_KEY": "enrollments:sections:available",
    "AVAILABLE_SECTIONS_CACHE_TTL": 300,
    "MAX_PAGE_SIZE": 100,
}

DECIMAL_SETTINGS = {"MONTHLY_UNIT_PRICE", "SESSION_ENROLLMENT_FEE", "PRICE_TOLERANCE"}


class AppSettings:
    """Lazy accessor so tests can override ``ENROLLMENTS`` with the settings fixture."""

    def __init__(self, defaults: dict) -> None:
        self._defaults = defaults
        self._cached: dict = {}

    @property
    def user_settings(self) -> dict:
        return getattr(settings, "ENROLLMENTS", {})

    def __getattr__(self, name: str):
        if name not in self._defaults:
            raise AttributeError(f"Invalid enrollments setting: {name!r}")
        if name not in self._cached:
            value = self.user_settings.get(name, self._defaults[name])
            if name in DECIMAL_SETTINGS:
                value = Decimal(str(value))
            self._cached[name] = value
        return self._cached[name]

    def reload(self) -> None:
        self._cached.clear()


app_settings = AppSettings(DEFAULTS)


def reload_app_settings(*args, setting, **kwargs) -> None:
    if setting == "ENROLLMENTS":
        app_settings.reload()


setting_changed.connect(reload_app_settings)
