"""
自訂 Exception 體系

統一的錯誤處理階層，讓每種失敗都有明確的分類與訊息。
上層可以 catch 大類別 (如 ScreenshotToolkitError)，
也可以精準 catch 子類別 (如 NoDeviceReachableError)。

Exception 樹：
    ScreenshotToolkitError
    ├── TransportError
    │   ├── ToolUnavailableError      (致命)
    │   ├── NoDeviceReachableError    (致命)
    │   └── TransportTimeoutError
    ├── ScreenshotNameError
    │   └── MalformedNameError
    ├── FileOperationError
    │   └── CopyFailureError
    └── ConfigError
        └── InvalidConfigError
"""


class ScreenshotToolkitError(Exception):
    """工具所有例外的基底，catch 這個就能攔截一切工具錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── 裝置傳輸相關 ──

class TransportError(ScreenshotToolkitError):
    """裝置控制工具 (adb) 相關錯誤"""


class ToolUnavailableError(TransportError):
    """找不到裝置控制工具"""

    def __init__(self, tool: str = "adb"):
        super().__init__(f"找不到 {tool}，請確認已加入 PATH", context={"tool": tool})


class NoDeviceReachableError(TransportError):
    """沒有可用裝置，或指定 serial 不存在"""

    def __init__(self, serial: str | None = None):
        msg = "沒有已連線的裝置"
        if serial:
            msg += f" (serial: {serial})"
        super().__init__(msg, context={"serial": serial})


class TransportTimeoutError(TransportError):
    """單一遠端操作超過逾時"""

    def __init__(self, command: str = "", timeout: float = 0):
        msg = f"指令逾時: {command}"
        if timeout:
            msg += f" ({timeout}s)"
        super().__init__(msg, context={"command": command, "timeout": timeout})


# ── 截圖命名相關 ──

class ScreenshotNameError(ScreenshotToolkitError):
    """截圖檔名相關錯誤"""


class MalformedNameError(ScreenshotNameError):
    """檔名不符合 Run_/Test_/Step_ 命名規則"""

    def __init__(self, filename: str = "", reason: str = ""):
        msg = f"無法解析截圖檔名: {filename}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"filename": filename})


# ── 本機檔案相關 ──

class FileOperationError(ScreenshotToolkitError):
    """本機檔案操作錯誤"""


class CopyFailureError(FileOperationError):
    """複製檔案失敗（權限、磁碟空間等）"""

    def __init__(self, source: str = "", target: str = "", original: Exception | None = None):
        self.original = original
        msg = f"複製失敗: {source} -> {target}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"source": source, "target": target})


# ── Config 相關 ──

class ConfigError(ScreenshotToolkitError):
    """設定相關錯誤"""


class InvalidConfigError(ConfigError):
    """設定值無效"""

    def __init__(self, key: str = "", value: str = "", reason: str = ""):
        msg = f"設定值無效: {key}={value}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"key": key, "value": value})
