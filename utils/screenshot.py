"""
截圖工具
測試執行中依步驟截圖，檔名採結構化命名，方便之後從裝置擷取並整理。

Session / step 狀態放在 ScreenshotSession 物件裡，由呼叫端持有並傳入，
不使用全域計數器。

用法：
    session = ScreenshotSession()
    session.start_test("test_login")
    take_screenshot(driver, session, "initial")       # Step_01
    take_screenshot(driver, session, "submitted")     # Step_02
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from config.config import Config
from utils.allure_helper import attach_file
from utils.logger import logger
from utils.screenshot_naming import ScreenshotRecord, encode, sanitize_name

if TYPE_CHECKING:
    from appium.webdriver import Remote as WebDriver

UNKNOWN_TEST = "UnknownTest"


class ScreenshotSession:
    """一次測試執行的 session id 與目前測試的步驟計數"""

    def __init__(self, session_id: str | None = None):
        self.session_id = sanitize_name(session_id or "") or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.test_name: str | None = None
        self._step = 0

    def start_test(self, test_name: str) -> None:
        """切換到新的測試，步驟計數歸零"""
        self.test_name = sanitize_name(test_name) or UNKNOWN_TEST
        self._step = 0

    @property
    def current_step(self) -> int:
        return self._step

    def next_record(self, description: str, step: int | None = None) -> ScreenshotRecord:
        """
        產生下一張截圖的 record。

        Args:
            description: 截圖說明（會轉成 snake_case 安全字元）
            step: 指定步驟編號；None 時自動遞增
        """
        if step is None:
            self._step += 1
            step = self._step
        else:
            self._step = step

        return ScreenshotRecord(
            session=self.session_id,
            test_name=self.test_name or UNKNOWN_TEST,
            step=step,
            timestamp=datetime.now().strftime("%H%M%S_%f")[:-3],
            description=sanitize_name(description) or "screenshot",
        )


def take_screenshot(
    driver: "WebDriver",
    session: ScreenshotSession,
    description: str,
    step: int | None = None,
    output_dir: Path | None = None,
) -> str | None:
    """
    擷取螢幕截圖並以結構化檔名儲存。

    Args:
        driver: Appium driver 實例
        session: 目前的 ScreenshotSession
        description: 截圖說明
        step: 步驟編號，None 時自動遞增
        output_dir: 輸出目錄，預設 Config.SCREENSHOT_DIR

    Returns:
        截圖檔案的完整路徑，driver 回報失敗時回傳 None
    """
    directory = Path(output_dir or Config.SCREENSHOT_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    record = session.next_record(description, step)
    filepath = directory / encode(record)

    if not driver.save_screenshot(str(filepath)):
        logger.warning(f"截圖失敗: {filepath.name}")
        return None

    logger.info(f"截圖已儲存: {filepath}")
    attach_file(str(filepath), name=f"Step {record.step}: {record.description}")
    return str(filepath)
