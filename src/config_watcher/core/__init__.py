"""Core contracts shared by the watcher components."""

from config_watcher.core.interfaces import ConfigReader, ErrorHandler, INotificationSource

__all__ = ["ConfigReader", "ErrorHandler", "INotificationSource"]
