"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from movediff.config.models import DiffConfig, FormatConfig, MoveDiffConfig


class TestDiffConfig:
    def test_defaults(self) -> None:
        config = DiffConfig()
        assert config.context_lines == 3
        assert config.ignore_whitespace is False
        assert config.modules is None

    def test_zero_context_allowed(self) -> None:
        assert DiffConfig(context_lines=0).context_lines == 0

    def test_negative_context_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiffConfig(context_lines=-1)


class TestFormatConfig:
    def test_narrow_width_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FormatConfig(width=10)


class TestMoveDiffConfig:
    def test_sections_independent(self) -> None:
        """Default factories give each instance its own sections."""
        a = MoveDiffConfig()
        b = MoveDiffConfig()
        assert a.diff is not b.diff
        assert a.logging.outputs[0].destination == "stderr"
