"""Tests for the error hierarchy and its formatting."""

import pytest

from patternbus.utils.errors import (
    BusError,
    ConfigurationError,
    DuplicateRelayerError,
    InvalidPatternError,
    ParseError,
    TransformError,
)


class TestErrors:
    """Test suite for BusError and its subclasses."""

    @pytest.mark.parametrize("error", [
        InvalidPatternError("topic"),
        DuplicateRelayerError("sub-1", "sub-2"),
        TransformError("sub-1", KeyError("content")),
        ConfigurationError("bad value"),
        ParseError("bad flag"),
    ])
    def test_all_errors_are_bus_errors(self, error):
        assert isinstance(error, BusError)

    def test_str_includes_class_and_message(self):
        rendered = str(BusError("something broke"))

        assert "BusError:" in rendered
        assert "something broke" in rendered

    def test_str_includes_subscriber_and_detail(self):
        rendered = str(BusError("something broke", subscriber_id="sub-1234", detail="more info"))

        assert "sub-1234" in rendered
        assert "more info" in rendered

    def test_invalid_pattern_error(self):
        error = InvalidPatternError(["topic"])

        assert isinstance(error, TypeError)
        assert error.pattern == ["topic"]
        assert "list" in str(error)

    def test_duplicate_relayer_error(self):
        error = DuplicateRelayerError("sub-down", "sub-up")

        assert error.subscriber_id == "sub-down"
        assert error.relayer_id == "sub-up"
        assert "sub-up" in str(error)

    def test_transform_error_keeps_cause(self):
        cause = ValueError("nope")
        error = TransformError("sub-1", cause)

        assert error.cause is cause
        assert error.subscriber_id == "sub-1"
        assert "nope" in str(error)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise ConfigurationError("bad value")

    def test_parse_error_prefix(self):
        error = ParseError("bad flag", detail="--logConfig missing.json")

        assert error.message == "Parse error: bad flag"
        assert "--logConfig missing.json" in str(error)
