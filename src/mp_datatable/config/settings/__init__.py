"""Config settings – dataclass settings loaded from the environment."""
from mp_datatable.config.settings.base import Settings
from mp_datatable.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from mp_datatable.config.settings.table import TableSettings

__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader", "TableSettings"]
