"""Tests for srm.core.result module."""

from __future__ import annotations

import pytest

from srm.core.result import Err, Ok, Result


def _lookup(found: bool) -> Result[tuple[str, ...], str]:
    if found:
        return Ok(("a.py",))
    return Err("unknown revision")


class TestOk:
    def test_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_repr(self) -> None:
        assert repr(Ok(("a.py",))) == "Ok(('a.py',))"


class TestErr:
    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="unknown revision"):
            Err("unknown revision").unwrap()

    def test_repr(self) -> None:
        assert repr(Err("x")) == "Err('x')"


class TestPatternMatching:
    def test_match(self) -> None:
        match _lookup(True):
            case Ok(files):
                assert files == ("a.py",)
            case Err(_):
                pytest.fail("expected Ok")

        match _lookup(False):
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert error == "unknown revision"
