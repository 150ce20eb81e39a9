"""Tests for relprep.core.errors module."""

from relprep.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.VERIFY_ERROR == 3
        assert ErrorCode.GIT_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str(self) -> None:
        assert str(ErrorCode.GIT_ERROR) == "git error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.VERIFY_ERROR.is_success

    def test_usable_as_exit_code(self) -> None:
        assert int(ErrorCode.ENV_ERROR) == 2
