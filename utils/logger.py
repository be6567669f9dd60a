"""
日誌模組
擷取工具共用的 logger，同時輸出到 console 與 Config.REPORT_DIR 下的檔案。

- console：LOG_LEVEL 控制等級，CLI --verbose 時降到 DEBUG
- extract.log：完整 DEBUG 紀錄（每個 adb 指令、每個檔案）
- extract.json.log：LOG_JSON=1 時啟用，一行一筆 JSON；
  工具例外的 context（serial、檔名、指令…）會一併寫入
"""

import json
import logging
import sys
from datetime import datetime, timezone

from config.config import Config

LOG_DIR = Config.REPORT_DIR
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOGGER_NAME = "screenshot_toolkit"
TEXT_FORMAT = logging.Formatter(
    "[%(asctime)s] %(levelname)-7s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


class JsonFormatter(logging.Formatter):
    """一行一筆 JSON，附帶工具例外的 context"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            error = record.exc_info[1]
            entry["exception"] = self.formatException(record.exc_info)
            context = getattr(error, "context", None)
            if context:
                entry["context"] = {k: str(v) for k, v in context.items()}
        return json.dumps(entry, ensure_ascii=False)


def _file_handler(filename: str, formatter: logging.Formatter) -> logging.FileHandler:
    handler = logging.FileHandler(LOG_DIR / filename, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def _is_console(handler: logging.Handler) -> bool:
    # FileHandler 也是 StreamHandler 的子類
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def _create_logger() -> logging.Logger:
    _logger = logging.Logger(LOGGER_NAME)
    _logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
    console.setFormatter(TEXT_FORMAT)
    _logger.addHandler(console)

    _logger.addHandler(_file_handler("extract.log", TEXT_FORMAT))
    if Config.LOG_JSON:
        _logger.addHandler(_file_handler("extract.json.log", JsonFormatter()))

    return _logger


def set_console_level(level: int) -> None:
    """調整 console 等級，檔案 handler 維持 DEBUG"""
    for handler in logger.handlers:
        if _is_console(handler):
            handler.setLevel(level)


logger = _create_logger()
