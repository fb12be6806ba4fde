"""Application-level wiring: configuration, logging and background maintenance."""

from .config import Config, RecycleBinConfig, ServerConfig
from .logger import setup_logger

__all__ = ["Config", "RecycleBinConfig", "ServerConfig", "setup_logger"]
