"""
裝置傳輸層
透過外部裝置控制工具 (adb) 對單一裝置執行遠端操作：
列目錄、整批拉取、單檔拉取、刪除、讀取系統屬性。

每個操作都有逾時；逾時時 subprocess 會強制結束子程序，操作回報失敗，
不會無限等待。傳輸層不做自動重試，fallback 策略由 Extractor 決定。

DeviceTransport 是抽象介面，測試時可以換成假的實作，不需要真實裝置。

用法：
    transport = AdbTransport(serial="emulator-5554", verbose=True)
    if transport.is_tool_available() and transport.is_device_reachable():
        names = transport.list_files("/sdcard/Pictures/Screenshots/UITests")
"""

from __future__ import annotations

import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from config.config import Config
from utils.logger import logger


@dataclass
class CommandResult:
    """一次外部指令的結果"""
    exit_code: int
    output: str
    timed_out: bool = False
    command: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


@dataclass
class RemoteFileEntry:
    """遠端列目錄結果"""
    name: str
    exists: bool = True


@dataclass
class DeviceInfo:
    """裝置資訊"""
    model: str
    android_version: str = ""
    sdk_version: int = 0


class DeviceTransport(ABC):
    """裝置傳輸介面"""

    # 目標裝置 serial；None 表示交給外部工具的預設裝置
    serial: str | None = None
    # 錯誤訊息中顯示的工具名稱
    tool_name: str = "adb"

    @abstractmethod
    def is_tool_available(self) -> bool:
        """外部工具是否在 PATH 上"""

    @abstractmethod
    def is_device_reachable(self, serial: str | None = None) -> bool:
        """指定（或預設）裝置是否可用"""

    @abstractmethod
    def list_files(self, remote_path: str) -> list[str]:
        """列出遠端目錄的檔名；目錄不存在時回傳空列表"""

    @abstractmethod
    def pull_all(self, remote_path: str, local_dir: Path) -> CommandResult:
        """整個遠端目錄拉到本機目錄"""

    @abstractmethod
    def pull_one(self, remote_file: str, local_file: Path) -> CommandResult:
        """拉取單一檔案"""

    @abstractmethod
    def remove_all(self, remote_path: str) -> CommandResult:
        """刪除遠端目錄下所有檔案"""

    @abstractmethod
    def read_property(self, name: str) -> str | None:
        """讀取裝置系統屬性，失敗回傳 None"""

    def list_entries(self, remote_path: str) -> list[RemoteFileEntry]:
        return [RemoteFileEntry(name=name) for name in self.list_files(remote_path)]

    def get_device_info(self) -> DeviceInfo | None:
        """取得裝置型號、Android 版本、SDK 版本"""
        model = self.read_property("ro.product.model")
        if model is None:
            return None

        version = self.read_property("ro.build.version.release") or ""
        sdk = self.read_property("ro.build.version.sdk") or ""
        return DeviceInfo(
            model=model,
            android_version=version,
            sdk_version=int(sdk) if sdk.isdigit() else 0,
        )


class AdbTransport(DeviceTransport):
    """以 adb 子程序實作的傳輸層"""

    def __init__(
        self,
        serial: str | None = None,
        adb_path: str = Config.ADB_PATH,
        timeout: int = Config.ADB_TIMEOUT,
        prop_timeout: int = Config.PROP_TIMEOUT,
        verbose: bool = False,
    ):
        self.serial = serial
        self.adb_path = adb_path
        self.timeout = timeout
        self.prop_timeout = prop_timeout
        self.verbose = verbose

    @property
    def tool_name(self) -> str:
        return self.adb_path

    # ── 公開 API ──

    def is_tool_available(self) -> bool:
        return shutil.which(self.adb_path) is not None

    def list_devices(self) -> list[str]:
        """回傳狀態為 device 的 serial 列表"""
        result = self._exec("devices", with_serial=False)
        if not result.ok:
            return []

        devices = []
        for line in result.output.splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[1] == "device":
                devices.append(parts[0])
        return devices

    def is_device_reachable(self, serial: str | None = None) -> bool:
        serial = serial or self.serial
        devices = self.list_devices()

        if not devices:
            return False
        if serial is None:
            # 多台裝置又未指定 serial 時不猜
            return len(devices) == 1
        return serial in devices

    def list_files(self, remote_path: str) -> list[str]:
        result = self._exec("shell", "ls", "-1", remote_path)
        if not result.ok or "No such file" in result.output:
            return []
        return [line.strip() for line in result.output.splitlines() if line.strip()]

    def pull_all(self, remote_path: str, local_dir: Path) -> CommandResult:
        return self._exec("pull", f"{remote_path.rstrip('/')}/.", str(local_dir))

    def pull_one(self, remote_file: str, local_file: Path) -> CommandResult:
        return self._exec("pull", remote_file, str(local_file))

    def remove_all(self, remote_path: str) -> CommandResult:
        return self._exec("shell", "rm", "-rf", f"{remote_path.rstrip('/')}/*")

    def read_property(self, name: str) -> str | None:
        result = self._exec("shell", "getprop", name, timeout=self.prop_timeout)
        return result.output if result.ok else None

    # ── 內部方法 ──

    def _base_cmd(self, with_serial: bool = True) -> list[str]:
        if with_serial and self.serial:
            return [self.adb_path, "-s", self.serial]
        return [self.adb_path]

    def _exec(
        self,
        *args: str,
        timeout: float | None = None,
        with_serial: bool = True,
    ) -> CommandResult:
        """執行 adb 指令；逾時由 subprocess.run 強制結束子程序"""
        cmd = self._base_cmd(with_serial) + list(args)
        cmd_str = " ".join(cmd)
        timeout = timeout or self.timeout

        if self.verbose:
            logger.info(f"  > {cmd_str}")
        else:
            logger.debug(f"adb: {cmd_str}")

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"指令逾時 ({timeout}s): {cmd_str}")
            return CommandResult(-1, "Command timed out", timed_out=True, command=cmd_str)
        except OSError as e:
            logger.warning(f"無法執行 {cmd_str}: {e}")
            return CommandResult(127, str(e), command=cmd_str)

        output = (proc.stdout or "") + (proc.stderr or "")
        return CommandResult(proc.returncode, output.strip(), command=cmd_str)
