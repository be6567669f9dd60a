"""
設定管理模組
統一管理裝置截圖路徑、adb 執行檔、逾時與輸出目錄等設定。
支援透過環境變數覆蓋預設值，方便 CI/CD 整合。
"""

import os
from datetime import datetime
from pathlib import Path

from core.exceptions import InvalidConfigError

BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    """工具全域設定"""

    # 裝置端截圖目錄（截圖端寫入、擷取端讀取）
    DEVICE_PATH = os.getenv("DEVICE_PATH", "/sdcard/Pictures/Screenshots/UITests")

    # adb
    ADB_PATH = os.getenv("ADB_PATH", "adb")

    # 超時設定 (秒)
    ADB_TIMEOUT = int(os.getenv("ADB_TIMEOUT", "60"))
    PROP_TIMEOUT = int(os.getenv("PROP_TIMEOUT", "10"))

    # 截圖與報告
    SCREENSHOT_DIR = Path(os.getenv("SCREENSHOT_DIR", str(BASE_DIR / "screenshots")))
    REPORT_DIR = Path(os.getenv("REPORT_DIR", str(BASE_DIR / "reports")))
    INDEX_NAME = os.getenv("INDEX_NAME", "index.md")

    # 日誌
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON = os.getenv("LOG_JSON", "").strip() == "1"

    @classmethod
    def default_output_dir(cls) -> Path:
        """預設擷取輸出目錄：./screenshots_YYYYMMDD_HHMMSS"""
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path.cwd() / f"screenshots_{ts}"

    @classmethod
    def validate(cls) -> None:
        """
        驗證設定值。

        Raises:
            InvalidConfigError: 逾時非正數或裝置路徑不是絕對路徑
        """
        for key in ("ADB_TIMEOUT", "PROP_TIMEOUT"):
            value = getattr(cls, key)
            if value <= 0:
                raise InvalidConfigError(key, str(value), "必須大於 0")

        if not cls.DEVICE_PATH.startswith("/"):
            raise InvalidConfigError("DEVICE_PATH", cls.DEVICE_PATH, "必須是絕對路徑")
