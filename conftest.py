"""
pytest 全域 fixtures

提供：
- screenshot_session：整個測試執行共用一個 session id
- screenshots：每個測試自動切換 test name、步驟歸零
- capture：綁定目前測試 session 的截圖函式
- fake_transport：不需要真實裝置的 DeviceTransport
- 命令列參數支援 (--screenshot-dir)
"""

from pathlib import Path

import pytest

from utils.adb_transport import CommandResult, DeviceTransport
from utils.screenshot import ScreenshotSession, take_screenshot


# ── 命令列參數 ──

def pytest_addoption(parser):
    """新增自訂命令列參數"""
    parser.addoption(
        "--screenshot-dir",
        action="store",
        default=None,
        help="截圖輸出目錄（預設 Config.SCREENSHOT_DIR）",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: 不需要裝置的單元測試")


# ── 截圖 Session ──

@pytest.fixture(scope="session")
def screenshot_session() -> ScreenshotSession:
    """整個測試執行共用的截圖 session"""
    return ScreenshotSession()


@pytest.fixture
def screenshots(request, screenshot_session) -> ScreenshotSession:
    """每個測試開始時切換 test name，步驟自動從 1 開始"""
    screenshot_session.start_test(request.node.name)
    return screenshot_session


@pytest.fixture(scope="session")
def screenshot_dir(request) -> Path | None:
    value = request.config.getoption("--screenshot-dir")
    return Path(value) if value else None


# ── 假裝置 ──

class FakeTransport(DeviceTransport):
    """
    記憶體中的假裝置。

    files: 裝置端檔名 → 內容
    bulk_fails: pull_all 是否失敗
    fail_names: pull_one 失敗的檔名
    timeout_names: pull_one 逾時的檔名
    """

    def __init__(self, files: dict[str, bytes] | None = None, serial: str | None = None):
        self.files = dict(files or {})
        self.serial = serial
        self.tool_available = True
        self.devices = ["emulator-5554"]
        self.bulk_fails = False
        self.remove_fails = False
        self.fail_names: set[str] = set()
        self.timeout_names: set[str] = set()
        self.properties: dict[str, str] = {}
        self.calls: list[tuple] = []

    def is_tool_available(self) -> bool:
        self.calls.append(("is_tool_available",))
        return self.tool_available

    def is_device_reachable(self, serial: str | None = None) -> bool:
        self.calls.append(("is_device_reachable", serial))
        if not self.devices:
            return False
        if serial is None:
            return len(self.devices) == 1
        return serial in self.devices

    def list_files(self, remote_path: str) -> list[str]:
        self.calls.append(("list_files", remote_path))
        return sorted(self.files)

    def pull_all(self, remote_path: str, local_dir: Path) -> CommandResult:
        self.calls.append(("pull_all", remote_path, local_dir))
        if self.bulk_fails:
            return CommandResult(1, "adb: error: failed to pull")
        for name, data in self.files.items():
            (Path(local_dir) / name).write_bytes(data)
        return CommandResult(0, f"{len(self.files)} files pulled")

    def pull_one(self, remote_file: str, local_file: Path) -> CommandResult:
        self.calls.append(("pull_one", remote_file, local_file))
        name = remote_file.rsplit("/", 1)[-1]
        if name in self.timeout_names:
            return CommandResult(-1, "Command timed out", timed_out=True, command=f"adb pull {remote_file}")
        if name in self.fail_names or name not in self.files:
            return CommandResult(1, f"adb: error: failed to stat remote object '{remote_file}'")
        Path(local_file).write_bytes(self.files[name])
        return CommandResult(0, "1 file pulled")

    def remove_all(self, remote_path: str) -> CommandResult:
        self.calls.append(("remove_all", remote_path))
        if self.remove_fails:
            return CommandResult(1, "rm: Permission denied")
        self.files.clear()
        return CommandResult(0, "")

    def read_property(self, name: str) -> str | None:
        return self.properties.get(name)

    def called(self, method: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == method]


@pytest.fixture
def fake_transport() -> FakeTransport:
    """不需要真實裝置的傳輸層"""
    return FakeTransport()


@pytest.fixture
def capture(screenshots, screenshot_dir):
    """
    綁定目前測試的截圖函式。

    用法：
        def test_login(driver, capture):
            capture(driver, "initial")
            capture(driver, "submitted")
    """
    def _capture(driver, description: str, step: int | None = None):
        return take_screenshot(driver, screenshots, description, step, output_dir=screenshot_dir)
    return _capture
