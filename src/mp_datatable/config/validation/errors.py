"""Errors raised while building :class:`TableSettings`.

``setting_name`` is the environment variable (``DATATABLE_PAGE_SIZE``) when
the value came from the environment, or the dataclass field (``page_size``)
when the settings object was constructed directly.
"""
from mp_datatable.kernel.errors import BaseError


class ConfigError(BaseError):
    """Table settings could not be built."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A table setting without a default has no environment variable."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Table setting {setting_name} is not set in the environment")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A table setting parsed, but its value breaks a sizing or timing rule."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid table setting {setting_name}={value!r} ({reason})")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
