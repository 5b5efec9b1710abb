"""Unit tests for the flowgazer exception hierarchy.

Tests verify:
- issubclass relationships match the documented tree
- except clauses catch the expected subclasses
- all exceptions accept a message string
"""

import pytest

from flowgazer.core.exceptions import ConfigurationError, FlowgazerError, ProtocolError


ALL_CONCRETE = (ConfigurationError, ProtocolError)


# =============================================================================
# Hierarchy Tests
# =============================================================================


class TestExceptionHierarchy:
    @pytest.mark.parametrize("exc_cls", ALL_CONCRETE)
    def test_all_concrete_inherit_from_flowgazer_error(self, exc_cls: type) -> None:
        assert issubclass(exc_cls, FlowgazerError)

    def test_base_is_exception(self) -> None:
        assert issubclass(FlowgazerError, Exception)

    def test_siblings_are_unrelated(self) -> None:
        assert not issubclass(ConfigurationError, ProtocolError)
        assert not issubclass(ProtocolError, ConfigurationError)


# =============================================================================
# Catch Tests
# =============================================================================


class TestExceptionCatching:
    @pytest.mark.parametrize("exc_cls", ALL_CONCRETE)
    def test_caught_by_base(self, exc_cls: type) -> None:
        with pytest.raises(FlowgazerError):
            raise exc_cls("boom")

    @pytest.mark.parametrize("exc_cls", ALL_CONCRETE)
    def test_message_preserved(self, exc_cls: type) -> None:
        assert str(exc_cls("details here")) == "details here"
