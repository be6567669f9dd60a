"""
extractor — 裝置截圖擷取 + 整理

流程：
    檢查 adb / 裝置 → 列出裝置端截圖 → 整批拉取（失敗時逐檔）→
    解析檔名 → 整理成 Run / Test / Step 結構 → 產出 index.md →
    （可選）清除裝置端截圖

無法解析的檔案放到 unorganized/，不會被丟棄。
"""

from extractor.device_extractor import ExtractResult, ScreenshotExtractor
from extractor.organizer import OrganizeResult, ScreenshotOrganizer
from extractor.pipeline import PipelineSummary, ScreenshotPipeline

__all__ = [
    "ScreenshotExtractor",
    "ExtractResult",
    "ScreenshotOrganizer",
    "OrganizeResult",
    "ScreenshotPipeline",
    "PipelineSummary",
]
