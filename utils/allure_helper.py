"""
Allure 報告整合輔助
將測試截圖附加到 Allure 報告。
如未安裝 allure-pytest，所有方法會 graceful fallback，不影響執行。
"""

from pathlib import Path

from utils.logger import logger

try:
    import allure
    ALLURE_AVAILABLE = True
except ImportError:
    ALLURE_AVAILABLE = False
    logger.debug("allure-pytest 未安裝，Allure 報告功能停用")


def attach_file(filepath: str, name: str | None = None) -> None:
    """將截圖檔案附加到 Allure 報告"""
    if ALLURE_AVAILABLE:
        path = Path(filepath)
        allure.attach.file(
            str(path),
            name=name or path.name,
            attachment_type=allure.attachment_type.PNG,
        )
