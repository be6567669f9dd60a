"""
core — 工具核心

統一匯出例外體系，方便外部 import。

用法：
    from core import ScreenshotToolkitError, MalformedNameError
"""

from core.exceptions import (
    ConfigError,
    CopyFailureError,
    FileOperationError,
    InvalidConfigError,
    MalformedNameError,
    NoDeviceReachableError,
    ScreenshotNameError,
    ScreenshotToolkitError,
    ToolUnavailableError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    "ScreenshotToolkitError",
    # Transport
    "TransportError",
    "ToolUnavailableError",
    "NoDeviceReachableError",
    "TransportTimeoutError",
    # Naming
    "ScreenshotNameError",
    "MalformedNameError",
    # File
    "FileOperationError",
    "CopyFailureError",
    # Config
    "ConfigError",
    "InvalidConfigError",
]
