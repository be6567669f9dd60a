"""
截圖整理器

把暫存目錄中的平面檔案整理成 Run / Test / Step 三層結構：

    output/
      Run_{session}/
        Test_{name}/
          Step_01_{description}.png
      unorganized/
        {無法解析的原始檔名}.png
      index.md

- 無法解析的檔名複製到 unorganized/，不丟棄
- 目標檔案已存在時覆蓋，重複執行結果相同
- 單一檔案複製失敗只記錄，繼續處理下一個
- index.md 每次整份重新產生，step 依數值排序

沒有任何鎖；同一個輸出目錄不要同時跑兩個整理流程，由呼叫端負責。
"""

from __future__ import annotations

import shutil
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

from config.config import Config
from core.exceptions import CopyFailureError
from utils.logger import logger
from utils.screenshot_naming import (
    SUFFIX,
    ScreenshotRecord,
    StagedFile,
    derive_paths,
    sort_by_step,
)

UNORGANIZED_DIR = "unorganized"


@dataclass
class OrganizeResult:
    """整理結果：runs / tests 是不重複的目錄數，failed 為複製失敗的暫存檔名"""
    runs: int = 0
    tests: int = 0
    screenshots: int = 0
    errors: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class ScreenshotOrganizer:
    """暫存目錄 → Run/Test/Step 結構 + 索引"""

    def __init__(self, verbose: bool = False, index_name: str = Config.INDEX_NAME):
        self.verbose = verbose
        self.index_name = index_name

    def organize(
        self,
        source_dir: Path,
        output_dir: Path,
        files: list[StagedFile] | None = None,
    ) -> OrganizeResult:
        """
        整理 source_dir 下所有 .png 到 output_dir。

        Args:
            source_dir: 暫存目錄（平面）
            output_dir: 輸出根目錄
            files: 只整理這些檔案；None 時掃描 source_dir

        Returns:
            OrganizeResult
        """
        source_dir = Path(source_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        errors: list[str] = []
        failed: list[str] = []
        run_dirs: set[str] = set()
        test_dirs: set[str] = set()
        organized: list[ScreenshotRecord] = []
        quarantined: list[str] = []

        staged_files = self.scan(source_dir) if files is None else files
        for staged in staged_files:
            if staged.record is None:
                errors.append(f"Could not parse: {staged.path.name}")
                logger.warning(f"無法解析檔名: {staged.path.name}")
                if self._quarantine(staged.path, output_dir, errors):
                    quarantined.append(staged.path.name)
                else:
                    failed.append(staged.path.name)
                continue

            run_dir, test_dir, step_file = derive_paths(staged.record)
            target = output_dir / run_dir / test_dir / step_file

            try:
                self._copy(staged.path, target)
            except CopyFailureError as e:
                errors.append(f"Failed to copy {staged.path.name}: {e}")
                logger.error(str(e))
                failed.append(staged.path.name)
                continue

            organized.append(staged.record)
            run_dirs.add(run_dir)
            test_dirs.add(f"{run_dir}/{test_dir}")

            if self.verbose:
                logger.info(f"  {staged.path.name} -> {run_dir}/{test_dir}/{step_file}")

        result = OrganizeResult(
            runs=len(run_dirs),
            tests=len(test_dirs),
            screenshots=len(organized),
            errors=errors,
            failed=failed,
        )
        self.write_index(output_dir, organized, quarantined, result)
        logger.info(
            f"整理完成: {result.runs} runs, {result.tests} tests, "
            f"{result.screenshots} 張截圖, {len(errors)} 個錯誤"
        )
        return result

    @staticmethod
    def scan(source_dir: Path) -> list[StagedFile]:
        """掃描暫存目錄中的 .png（依檔名排序）"""
        if not source_dir.is_dir():
            return []
        return [
            StagedFile.from_path(path)
            for path in sorted(source_dir.glob(f"*{SUFFIX}"))
            if path.is_file()
        ]

    def write_index(
        self,
        output_dir: Path,
        records: list[ScreenshotRecord],
        quarantined: list[str] | None = None,
        result: OrganizeResult | None = None,
    ) -> Path:
        """產生 Markdown 索引（整份覆寫）"""
        index_path = output_dir / self.index_name
        index_path.write_text(
            self.build_index(records, quarantined or [], result),
            encoding="utf-8",
        )
        logger.debug(f"索引已產生: {index_path}")
        return index_path

    @staticmethod
    def build_index(
        records: list[ScreenshotRecord],
        quarantined: list[str],
        result: OrganizeResult | None = None,
    ) -> str:
        tree: dict[str, dict[str, list[ScreenshotRecord]]] = defaultdict(
            lambda: defaultdict(list)
        )
        for record in records:
            tree[record.run_dir][record.test_dir].append(record)

        total = result.screenshots if result else len(records)
        test_count = sum(len(tests) for tests in tree.values())

        lines = [
            "# Screenshot Extraction Results",
            "",
            f"- **Total screenshots**: {total}",
            f"- **Test runs**: {len(tree)}",
            f"- **Test cases**: {test_count}",
            "",
            "## Runs",
            "",
        ]

        for run_dir in sorted(tree):
            lines.append(f"### {run_dir}")
            lines.append("")
            for test_dir in sorted(tree[run_dir]):
                lines.append(f"- {test_dir}")
                for record in sort_by_step(tree[run_dir][test_dir]):
                    _, _, step_file = derive_paths(record)
                    alt = step_file[: -len(SUFFIX)]
                    lines.append(f"  - ![{alt}]({run_dir}/{test_dir}/{step_file})")
            lines.append("")

        if quarantined:
            lines.append(f"## {UNORGANIZED_DIR}")
            lines.append("")
            for name in sorted(quarantined):
                lines.append(f"- [{name}]({UNORGANIZED_DIR}/{name})")
            lines.append("")

        return "\n".join(lines)

    def group_by_run(self, files: list[Path]) -> dict[str, list[Path]]:
        """依 Run 目錄分組，無法解析的檔案略過"""
        groups: dict[str, list[Path]] = defaultdict(list)
        for staged in map(StagedFile.from_path, files):
            if staged.record is not None:
                groups[staged.record.run_dir].append(staged.path)
        return dict(groups)

    def group_by_test(self, files: list[Path]) -> dict[str, list[Path]]:
        """依 Run/Test 分組，無法解析的檔案略過"""
        groups: dict[str, list[Path]] = defaultdict(list)
        for staged in map(StagedFile.from_path, files):
            if staged.record is not None:
                key = f"{staged.record.run_dir}/{staged.record.test_dir}"
                groups[key].append(staged.path)
        return dict(groups)

    # ── 內部方法 ──

    def _quarantine(self, path: Path, output_dir: Path, errors: list[str]) -> bool:
        target = output_dir / UNORGANIZED_DIR / path.name
        try:
            self._copy(path, target)
        except CopyFailureError as e:
            errors.append(f"Failed to copy {path.name}: {e}")
            logger.error(str(e))
            return False
        return True

    @staticmethod
    def _copy(source: Path, target: Path) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as e:
            raise CopyFailureError(str(source), str(target), e) from e
