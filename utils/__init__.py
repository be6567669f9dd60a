from utils.logger import logger
from utils.screenshot import ScreenshotSession, take_screenshot
from utils.screenshot_naming import (
    ScreenshotRecord,
    decode,
    derive_paths,
    encode,
    is_valid_name,
)
from utils.adb_transport import AdbTransport, DeviceTransport

__all__ = [
    "logger",
    "ScreenshotSession",
    "take_screenshot",
    "ScreenshotRecord",
    "decode",
    "encode",
    "derive_paths",
    "is_valid_name",
    "AdbTransport",
    "DeviceTransport",
]
