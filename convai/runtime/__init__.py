from .logging import configure_logging
from .settings_loader import load_settings

__all__ = ["configure_logging", "load_settings"]
