"""
擷取流程

Extractor → Organizer → (可選) 清除裝置截圖

- adb / 裝置不可用時直接拋出例外，不動任何檔案
- 整理模式下暫存到 output/.raw，全部整理成功後刪除暫存目錄；
  有檔案複製失敗時保留暫存目錄，也不清除裝置
- 不整理時直接拉到 output，保持平面
- 遠端清除只在擷取完成後、且呼叫端要求時執行；有檔案拉取失敗時略過

用法：
    pipeline = ScreenshotPipeline(
        ScreenshotExtractor(AdbTransport(serial="emulator-5554")),
        ScreenshotOrganizer(),
    )
    summary = pipeline.run(Path("./screenshots"), organize=True, clean=False)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from extractor.device_extractor import ScreenshotExtractor
from extractor.organizer import OrganizeResult, ScreenshotOrganizer
from utils.logger import logger

STAGING_DIR = ".raw"


@dataclass
class PipelineSummary:
    """整體執行摘要"""
    output_dir: Path
    extracted: int = 0
    organized: OrganizeResult | None = None
    errors: list[str] = field(default_factory=list)
    cleaned: bool = False

    @property
    def all_errors(self) -> list[str]:
        errors = list(self.errors)
        if self.organized:
            errors.extend(self.organized.errors)
        return errors


class ScreenshotPipeline:
    """串接擷取與整理"""

    def __init__(
        self,
        extractor: ScreenshotExtractor,
        organizer: ScreenshotOrganizer | None = None,
    ):
        self.extractor = extractor
        self.organizer = organizer or ScreenshotOrganizer()

    def run(self, output_dir: Path, organize: bool = True, clean: bool = False) -> PipelineSummary:
        """
        執行完整流程。

        Args:
            output_dir: 輸出目錄
            organize: 是否整理成 Run/Test/Step 結構
            clean: 擷取完成後是否刪除裝置上的截圖

        Returns:
            PipelineSummary

        Raises:
            ToolUnavailableError: 找不到 adb
            NoDeviceReachableError: 沒有可用裝置
        """
        output_dir = Path(output_dir)
        staging_dir = output_dir / STAGING_DIR if organize else output_dir
        summary = PipelineSummary(output_dir=output_dir)

        extracted = self.extractor.extract(staging_dir)
        summary.extracted = extracted.count
        summary.errors.extend(extracted.failures)

        if not extracted.files:
            logger.info("沒有擷取到任何截圖")
            if organize:
                self._remove_empty(staging_dir)
            return summary

        if organize:
            logger.info("整理截圖...")
            summary.organized = self.organizer.organize(
                staging_dir, output_dir, files=extracted.files
            )
            if summary.organized.failed:
                # 複製失敗的檔案只剩暫存這一份
                logger.warning(f"部分截圖整理失敗，保留暫存目錄: {staging_dir}")
                summary.errors.append(f"Kept staging dir with unorganized files: {staging_dir}")
            else:
                shutil.rmtree(staging_dir, ignore_errors=True)

        if clean and extracted.failures:
            # 有檔案沒拉到時保留裝置上的截圖
            logger.warning("部分截圖擷取失敗，略過清除裝置")
            summary.errors.append("Skipped device clean: some files failed to pull")
        elif clean and summary.organized and summary.organized.failed:
            logger.warning("部分截圖整理失敗，略過清除裝置")
            summary.errors.append("Skipped device clean: some files failed to organize")
        elif clean:
            summary.cleaned = self.extractor.cleanup()
            if not summary.cleaned:
                summary.errors.append(f"Failed to clean device path: {self.extractor.device_path}")

        return summary

    @staticmethod
    def _remove_empty(staging_dir: Path) -> None:
        if staging_dir.is_dir() and not any(staging_dir.iterdir()):
            staging_dir.rmdir()
