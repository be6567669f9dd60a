"""
Screenshot Extractor CLI 入口

用法:
    # 擷取並整理成 Run/Test/Step 結構（預設）
    python -m extractor ./screenshots

    # 指定裝置與裝置端路徑
    python -m extractor ./screenshots --serial emulator-5554 --device-path /sdcard/UITests

    # 保持平面，不整理
    python -m extractor ./screenshots --no-organize

    # 擷取後清除裝置上的截圖
    python -m extractor ./screenshots --clean

結束碼：設定無效、找不到 adb 或沒有裝置時為 1；其餘為 0（個別檔案錯誤只列出，不視為失敗）。
"""

import argparse
import logging
import sys
from pathlib import Path

from config.config import Config
from core.exceptions import InvalidConfigError, NoDeviceReachableError, ToolUnavailableError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extract-screenshots",
        description="從 Android 裝置擷取 UI 測試截圖",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "output_dir",
        metavar="OUTPUT_DIR",
        nargs="?",
        default=None,
        help="輸出目錄（預設 ./screenshots_YYYYMMDD_HHMMSS）",
    )
    parser.add_argument(
        "--device-path", "-p",
        default=Config.DEVICE_PATH,
        help=f"裝置端截圖目錄 (預設 {Config.DEVICE_PATH})",
    )
    parser.add_argument(
        "--serial", "-s",
        default=None,
        help="裝置 serial（多台裝置時必填）",
    )
    parser.add_argument(
        "--organize", "-o",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="整理成 Run/Test/Step 結構 (預設開啟)",
    )
    parser.add_argument(
        "--clean", "-c",
        action="store_true",
        help="擷取完成後刪除裝置上的截圖",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="顯示每個 adb 指令與每個檔案的處理",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=Config.ADB_TIMEOUT,
        help=f"單一 adb 指令逾時秒數 (預設 {Config.ADB_TIMEOUT})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        Config.validate()
        if args.timeout <= 0:
            raise InvalidConfigError("--timeout", str(args.timeout), "必須大於 0")
    except InvalidConfigError as e:
        print(f"錯誤: {e}", file=sys.stderr)
        return 1

    output = Path(args.output_dir).resolve() if args.output_dir else Config.default_output_dir()

    from extractor.device_extractor import ScreenshotExtractor
    from extractor.organizer import ScreenshotOrganizer
    from extractor.pipeline import ScreenshotPipeline
    from utils.adb_transport import AdbTransport
    from utils.logger import set_console_level

    if args.verbose:
        set_console_level(logging.DEBUG)

    print("從裝置擷取截圖...")
    if args.verbose:
        print(f"  裝置路徑: {args.device_path}")
        print(f"  輸出: {output}")
        print(f"  Serial: {args.serial or '(auto)'}")

    transport = AdbTransport(serial=args.serial, timeout=args.timeout, verbose=args.verbose)
    pipeline = ScreenshotPipeline(
        ScreenshotExtractor(transport, device_path=args.device_path, verbose=args.verbose),
        ScreenshotOrganizer(verbose=args.verbose),
    )

    try:
        summary = pipeline.run(output, organize=args.organize, clean=args.clean)
    except (ToolUnavailableError, NoDeviceReachableError) as e:
        print(f"錯誤: {e}", file=sys.stderr)
        return 1

    if summary.extracted == 0:
        print(f"裝置上沒有截圖: {args.device_path}")
    else:
        print(f"已擷取 {summary.extracted} 張截圖")

    if summary.organized:
        org = summary.organized
        print(f"已整理為 {org.runs} runs, {org.tests} tests, {org.screenshots} 張截圖")

    if summary.cleaned:
        print("已清除裝置上的截圖")

    errors = summary.all_errors
    if errors:
        print(f"\n錯誤 ({len(errors)}):")
        for error in errors:
            print(f"  - {error}")

    print(f"\n完成！截圖位置: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
