"""
utils.screenshot_naming 單元測試
驗證截圖檔名的解析、產生、路徑推導與分組工具。
"""

import pytest

from core.exceptions import MalformedNameError
from utils.screenshot_naming import (
    ScreenshotRecord,
    StagedFile,
    decode,
    derive_paths,
    encode,
    extract_session_from_path,
    group_by_session,
    group_by_test,
    is_valid_name,
    organized_path,
    sanitize_name,
    sort_by_step,
)

LOGIN_01 = "Run_20240115_143022__Test_testLogin__Step_01__143025_123__initial.png"
LOGIN_02 = "Run_20240115_143022__Test_testLogin__Step_02__143026_456__submitted.png"
LOGOUT_01 = "Run_20240115_143022__Test_testLogout__Step_01__143030_789__logout_button.png"


def _record(**overrides) -> ScreenshotRecord:
    values = dict(
        session="20240115_143022",
        test_name="testLogin",
        step=1,
        timestamp="143025_123",
        description="initial",
    )
    values.update(overrides)
    return ScreenshotRecord(**values)


@pytest.mark.unit
class TestDecode:
    """decode 解析檔名"""

    @pytest.mark.unit
    def test_decodes_all_fields(self):
        record = decode(LOGIN_01)
        assert record == _record()

    @pytest.mark.unit
    def test_strips_unix_path(self):
        """去掉前面的目錄"""
        assert decode(f"/sdcard/Pictures/Screenshots/UITests/{LOGIN_01}") == _record()

    @pytest.mark.unit
    def test_strips_windows_path(self):
        assert decode(f"C:\\shots\\{LOGIN_01}") == _record()

    @pytest.mark.unit
    def test_test_name_with_underscores(self):
        """Test_foo_bar 的 test_name 是 foo_bar，不會切錯"""
        record = decode("Run_20240115_143022__Test_foo_bar__Step_03__143025_123__done.png")
        assert record.session == "20240115_143022"
        assert record.test_name == "foo_bar"
        assert record.step == 3

    @pytest.mark.unit
    def test_description_may_contain_underscores(self):
        record = decode(LOGOUT_01)
        assert record.description == "logout_button"

    @pytest.mark.unit
    def test_three_digit_step(self):
        record = decode("Run_s1__Test_t__Step_123__1_2__d.png")
        assert record.step == 123

    @pytest.mark.unit
    @pytest.mark.parametrize("name", [
        "not_a_screenshot.png",
        "",
        LOGIN_01[:-4] + ".jpg",
        LOGIN_01[:-4] + ".PNG",
        "prefix_" + LOGIN_01,
        LOGIN_01 + ".bak",
        "Run_20240115_143022__Test_testLogin__Step_xx__143025_123__initial.png",
        "Run_20240115_143022__Test_testLogin__Step___143025_123__initial.png",
        "Run_20240115_143022__Test___Step_01__143025_123__initial.png",
        "Run_20240115_143022__Test_testLogin__Step_01__143025_123__.png",
        "Run_20240115_143022__Test_testLogin__Step_01__143025_123__has space.png",
        "Run_20240115_143022__Test_a__b__Step_01__143025_123__x.png",
    ])
    def test_malformed_raises(self, name):
        """不符合命名規則一律拋出 MalformedNameError"""
        with pytest.raises(MalformedNameError):
            decode(name)

    @pytest.mark.unit
    def test_error_carries_filename(self):
        with pytest.raises(MalformedNameError) as exc_info:
            decode("dir/not_a_screenshot.png")
        assert exc_info.value.context["filename"] == "not_a_screenshot.png"

    @pytest.mark.unit
    def test_pure(self):
        """同樣輸入永遠得到同樣結果"""
        assert decode(LOGIN_02) == decode(LOGIN_02)


@pytest.mark.unit
class TestEncode:
    """encode 產生檔名"""

    @pytest.mark.unit
    def test_encodes_expected_name(self):
        assert encode(_record()) == LOGIN_01

    @pytest.mark.unit
    def test_pads_single_digit_step(self):
        assert "__Step_07__" in encode(_record(step=7))

    @pytest.mark.unit
    def test_does_not_truncate_large_step(self):
        assert "__Step_100__" in encode(_record(step=100))
        assert "__Step_1234__" in encode(_record(step=1234))

    @pytest.mark.unit
    def test_step_zero(self):
        assert "__Step_00__" in encode(_record(step=0))

    @pytest.mark.unit
    @pytest.mark.parametrize("record", [
        _record(step=0),
        _record(step=9),
        _record(step=150),
        _record(test_name="foo_bar_baz"),
        _record(session="ci_run_42"),
        _record(description="after.tap-2"),
    ])
    def test_round_trip(self, record):
        """decode(encode(r)) == r"""
        assert decode(encode(record)) == record

    @pytest.mark.unit
    def test_round_trip_from_decoded_name(self):
        assert encode(decode(LOGIN_02)) == LOGIN_02

    @pytest.mark.unit
    def test_wider_padding_is_normalized(self):
        """Step_007 解析後重新產生為 Step_07"""
        record = decode("Run_s__Test_t__Step_007__1__d.png")
        assert record.step == 7
        assert encode(record) == "Run_s__Test_t__Step_07__1__d.png"

    @pytest.mark.unit
    @pytest.mark.parametrize("overrides", [
        {"test_name": "foo__bar"},
        {"test_name": "_foo"},
        {"session": "has space"},
        {"session": ""},
        {"timestamp": "12:00"},
        {"description": "a/b"},
        {"description": ""},
        {"step": -1},
    ])
    def test_rejects_ambiguous_fields(self, overrides):
        with pytest.raises(MalformedNameError):
            encode(_record(**overrides))

    @pytest.mark.unit
    def test_record_to_filename(self):
        assert _record().to_filename() == LOGIN_01


@pytest.mark.unit
class TestDerivePaths:
    """derive_paths / organized_path"""

    @pytest.mark.unit
    def test_derive_paths(self):
        assert derive_paths(_record()) == ("Run_20240115_143022", "Test_testLogin", "Step_01_initial.png")

    @pytest.mark.unit
    def test_step_filename_large_step(self):
        _, _, step_file = derive_paths(_record(step=101, description="end"))
        assert step_file == "Step_101_end.png"

    @pytest.mark.unit
    def test_organized_path(self):
        assert organized_path(decode(LOGIN_02)) == "Run_20240115_143022/Test_testLogin/Step_02_submitted.png"


@pytest.mark.unit
class TestHelpers:
    """輔助函式"""

    @pytest.mark.unit
    def test_is_valid_name(self):
        assert is_valid_name(LOGIN_01)
        assert is_valid_name(f"/tmp/{LOGIN_01}")
        assert not is_valid_name("not_a_screenshot.png")

    @pytest.mark.unit
    @pytest.mark.parametrize("raw, expected", [
        ("test login", "test_login"),
        ("testLogin[param-1]", "testLogin_param_1"),
        ("__a  b__", "a_b"),
        ("登入畫面", ""),
        ("already_ok", "already_ok"),
    ])
    def test_sanitize_name(self, raw, expected):
        assert sanitize_name(raw) == expected

    @pytest.mark.unit
    def test_group_by_session_skips_invalid(self):
        other = "Run_20240116_090000__Test_testLogin__Step_01__090001_000__x.png"
        groups = group_by_session([LOGIN_01, LOGIN_02, other, "junk.png"])
        assert set(groups) == {"20240115_143022", "20240116_090000"}
        assert len(groups["20240115_143022"]) == 2

    @pytest.mark.unit
    def test_group_by_test(self):
        groups = group_by_test([LOGIN_01, LOGIN_02, LOGOUT_01])
        assert len(groups["testLogin"]) == 2
        assert len(groups["testLogout"]) == 1

    @pytest.mark.unit
    def test_sort_by_step_numeric(self):
        records = [_record(step=10), _record(step=2), _record(step=1)]
        assert [r.step for r in sort_by_step(records)] == [1, 2, 10]

    @pytest.mark.unit
    def test_extract_session_from_path(self):
        path = "/sdcard/Pictures/Screenshots/UITests/Run_20240115_143022/file.png"
        assert extract_session_from_path(path) == "20240115_143022"

    @pytest.mark.unit
    def test_extract_session_innermost_wins(self):
        path = "Run_20240101_000000\\Run_20240115_143022\\file.png"
        assert extract_session_from_path(path) == "20240115_143022"

    @pytest.mark.unit
    def test_extract_session_missing(self):
        assert extract_session_from_path("/tmp/shots/file.png") is None


@pytest.mark.unit
class TestStagedFile:
    """StagedFile"""

    @pytest.mark.unit
    def test_valid_file_has_record(self, tmp_path):
        staged = StagedFile.from_path(tmp_path / LOGIN_01)
        assert staged.is_valid
        assert staged.record == _record()

    @pytest.mark.unit
    def test_invalid_file_has_no_record(self, tmp_path):
        staged = StagedFile.from_path(tmp_path / "not_a_screenshot.png")
        assert not staged.is_valid
        assert staged.record is None
