"""
截圖檔名編解碼

裝置端截圖使用結構化命名，方便擷取後重新整理：

    Run_{session}__Test_{name}__Step_{NN}__{timestamp}__{description}.png

例如：
    Run_20240115_143022__Test_testLogin__Step_01__143025_123__initial.png

欄位規則：
- 只有雙底線 `__` 是欄位分隔符
- session / test_name / timestamp 由英數字段以「單一」底線串接
  (Test_foo_bar → test_name = "foo_bar")，不得以底線開頭或結尾
- description 不可為空，不可含路徑分隔符或空白
- step 至少補零到兩位，>= 100 不截斷

整理後的相對路徑：
    Run_{session}/Test_{name}/Step_{NN}_{description}.png

本模組只做字串處理，不碰檔案系統。
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from core.exceptions import MalformedNameError

SUFFIX = ".png"

_FIELD = r"[A-Za-z0-9]+(?:_[A-Za-z0-9]+)*"
_DESCRIPTION = r"[^/\\\s]+"

NAME_PATTERN = re.compile(
    rf"Run_(?P<session>{_FIELD})"
    rf"__Test_(?P<test_name>{_FIELD})"
    rf"__Step_(?P<step>[0-9]+)"
    rf"__(?P<timestamp>{_FIELD})"
    rf"__(?P<description>{_DESCRIPTION})\.png"
)

_FIELD_PATTERN = re.compile(_FIELD)
_DESCRIPTION_PATTERN = re.compile(_DESCRIPTION)

# Run_YYYYMMDD_HHMMSS 資料夾
SESSION_FOLDER_PATTERN = re.compile(r"Run_(\d{8}_\d{6})")


@dataclass(frozen=True)
class ScreenshotRecord:
    """一張截圖的身分（解析自檔名，建立後不可變）"""
    session: str
    test_name: str
    step: int
    timestamp: str
    description: str

    @property
    def run_dir(self) -> str:
        return f"Run_{self.session}"

    @property
    def test_dir(self) -> str:
        return f"Test_{self.test_name}"

    @property
    def step_filename(self) -> str:
        return f"Step_{pad_step(self.step)}_{self.description}{SUFFIX}"

    def to_filename(self) -> str:
        return encode(self)


@dataclass
class StagedFile:
    """暫存目錄中的一個檔案，record 為 None 表示檔名無法解析"""
    path: Path
    record: ScreenshotRecord | None = None

    @classmethod
    def from_path(cls, path: Path) -> "StagedFile":
        try:
            record = decode(path.name)
        except MalformedNameError:
            record = None
        return cls(path=path, record=record)

    @property
    def is_valid(self) -> bool:
        return self.record is not None


def pad_step(step: int) -> str:
    """補零到至少兩位"""
    return str(step).zfill(2)


def _basename(filename: str) -> str:
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


def decode(filename: str) -> ScreenshotRecord:
    """
    解析截圖檔名。

    Args:
        filename: 檔名（可含路徑，會先去掉目錄部分）

    Returns:
        ScreenshotRecord

    Raises:
        MalformedNameError: 檔名不符合命名規則
    """
    name = _basename(filename)
    match = NAME_PATTERN.fullmatch(name)
    if not match:
        raise MalformedNameError(name)

    return ScreenshotRecord(
        session=match.group("session"),
        test_name=match.group("test_name"),
        step=int(match.group("step")),
        timestamp=match.group("timestamp"),
        description=match.group("description"),
    )


def encode(record: ScreenshotRecord) -> str:
    """
    產生截圖檔名，decode 的反函式。

    Raises:
        MalformedNameError: 欄位含有會造成歧義的字元
    """
    _validate(record)
    return (
        f"Run_{record.session}"
        f"__Test_{record.test_name}"
        f"__Step_{pad_step(record.step)}"
        f"__{record.timestamp}"
        f"__{record.description}{SUFFIX}"
    )


def _validate(record: ScreenshotRecord) -> None:
    for field_name in ("session", "test_name", "timestamp"):
        value = getattr(record, field_name)
        if not _FIELD_PATTERN.fullmatch(value):
            raise MalformedNameError(value, f"{field_name} 格式不符")
    if not _DESCRIPTION_PATTERN.fullmatch(record.description):
        raise MalformedNameError(record.description, "description 格式不符")
    if isinstance(record.step, bool) or not isinstance(record.step, int) or record.step < 0:
        raise MalformedNameError(str(record.step), "step 必須是非負整數")


def derive_paths(record: ScreenshotRecord) -> tuple[str, str, str]:
    """回傳 (run_dir, test_dir, step_filename)"""
    return record.run_dir, record.test_dir, record.step_filename


def organized_path(record: ScreenshotRecord) -> str:
    """整理後的相對路徑，例如 Run_20240115/Test_login/Step_01_initial.png"""
    return "/".join(derive_paths(record))


def is_valid_name(filename: str) -> bool:
    """檔名是否符合命名規則"""
    return NAME_PATTERN.fullmatch(_basename(filename)) is not None


def sanitize_name(name: str) -> str:
    """
    將任意文字轉成可用於檔名的欄位。
    非英數字元換成底線，連續底線合併，去掉頭尾底線。
    """
    name = re.sub(r"[^A-Za-z0-9_]", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def _parse_all(filenames) -> list[ScreenshotRecord]:
    records = []
    for filename in filenames:
        try:
            records.append(decode(str(filename)))
        except MalformedNameError:
            continue
    return records


def group_by_session(filenames) -> dict[str, list[ScreenshotRecord]]:
    """依 session 分組，無法解析的檔名略過"""
    groups: dict[str, list[ScreenshotRecord]] = defaultdict(list)
    for record in _parse_all(filenames):
        groups[record.session].append(record)
    return dict(groups)


def group_by_test(filenames) -> dict[str, list[ScreenshotRecord]]:
    """依 test_name 分組，無法解析的檔名略過"""
    groups: dict[str, list[ScreenshotRecord]] = defaultdict(list)
    for record in _parse_all(filenames):
        groups[record.test_name].append(record)
    return dict(groups)


def sort_by_step(records: list[ScreenshotRecord]) -> list[ScreenshotRecord]:
    """依 step 數值排序（stable）"""
    return sorted(records, key=lambda r: r.step)


def extract_session_from_path(path: str) -> str | None:
    """
    從路徑中找出 Run_YYYYMMDD_HHMMSS 資料夾並回傳 session。
    由最內層往外找，找不到回傳 None。
    """
    parts = path.replace("\\", "/").split("/")
    for part in reversed(parts):
        match = SESSION_FOLDER_PATTERN.fullmatch(part)
        if match:
            return match.group(1)
    return None
