"""
裝置截圖擷取器

從裝置列出並拉取結構化命名的截圖到本機暫存目錄：
    1. 檢查 adb 與裝置（失敗即中止，不動任何檔案）
    2. 列出遠端 .png
    3. 整批 pull；失敗時改逐檔 pull，個別失敗記錄後繼續
    4. 重新掃描暫存目錄，回傳這次列出且實際拉到的檔案

遠端刪除 (cleanup) 只在呼叫端明確要求、且暫存完成後才執行。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from config.config import Config
from core.exceptions import (
    NoDeviceReachableError,
    ToolUnavailableError,
    TransportTimeoutError,
)
from utils.adb_transport import CommandResult, DeviceTransport
from utils.logger import logger
from utils.screenshot_naming import SUFFIX, StagedFile


@dataclass
class ExtractResult:
    """擷取結果"""
    files: list[StagedFile] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def count(self) -> int:
        return len(self.files)


class ScreenshotExtractor:
    """透過 DeviceTransport 擷取裝置截圖"""

    def __init__(
        self,
        transport: DeviceTransport,
        device_path: str = Config.DEVICE_PATH,
        verbose: bool = False,
    ):
        self.transport = transport
        self.device_path = device_path.rstrip("/") or "/"
        self.verbose = verbose

    def check(self) -> None:
        """
        確認 adb 可用且裝置可連線。

        Raises:
            ToolUnavailableError: 找不到 adb
            NoDeviceReachableError: 沒有可用裝置
        """
        if not self.transport.is_tool_available():
            raise ToolUnavailableError(self.transport.tool_name)

        serial = self.transport.serial
        if not self.transport.is_device_reachable(serial):
            raise NoDeviceReachableError(serial)

    def list_screenshots(self) -> list[str]:
        """列出裝置上的截圖檔名（只取 .png，區分大小寫）"""
        return [
            name for name in self.transport.list_files(self.device_path)
            if name.endswith(SUFFIX)
        ]

    def extract(self, staging_dir: Path) -> ExtractResult:
        """
        將裝置截圖拉到暫存目錄。

        Args:
            staging_dir: 本機暫存目錄（本次執行獨佔）

        Returns:
            ExtractResult，files 為實際存在於暫存目錄的 .png
        """
        self.check()

        names = self.list_screenshots()
        if not names:
            logger.info(f"裝置上沒有截圖: {self.device_path}")
            return ExtractResult()

        staging_dir = Path(staging_dir)
        staging_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"找到 {len(names)} 張截圖，開始擷取")

        result = ExtractResult()
        bulk = self.transport.pull_all(self.device_path, staging_dir)

        if not bulk.ok:
            logger.warning(f"整批擷取失敗，改為逐檔擷取: {self._describe(bulk)}")
            result.used_fallback = True
            self._pull_individually(names, staging_dir, result)

        # 暫存目錄可能已有其他檔案（平面模式的輸出目錄），只算這次列出的
        listed = set(names)
        result.files = [
            StagedFile.from_path(path)
            for path in sorted(staging_dir.glob(f"*{SUFFIX}"))
            if path.name in listed
        ]
        logger.info(f"擷取完成: {result.count} 張成功, {len(result.failures)} 張失敗")
        return result

    def cleanup(self) -> bool:
        """刪除裝置上的截圖，回傳是否成功"""
        logger.info(f"清除裝置截圖: {self.device_path}")
        outcome = self.transport.remove_all(self.device_path)
        if not outcome.ok:
            logger.warning(f"清除裝置截圖失敗: {self._describe(outcome)}")
        return outcome.ok

    # ── 內部方法 ──

    def _pull_individually(
        self, names: list[str], staging_dir: Path, result: ExtractResult
    ) -> None:
        for name in names:
            outcome = self.transport.pull_one(
                f"{self.device_path}/{name}", staging_dir / name
            )
            if outcome.ok:
                if self.verbose:
                    logger.info(f"  Pulled: {name}")
                continue

            message = f"Failed to pull {name}: {self._describe(outcome)}"
            result.failures.append(message)
            logger.warning(f"  {message}")

    @staticmethod
    def _describe(outcome: CommandResult) -> str:
        if outcome.timed_out:
            return str(TransportTimeoutError(outcome.command))
        return outcome.output or f"exit code {outcome.exit_code}"
