"""Unit tests for shared utilities and error helpers."""

import logging
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from fakecandy.exceptions import (
    ConfigFileInvalidError,
    ConfigValidationError,
    ErrorContext,
    FakecandyError,
    UnknownChannelError,
    format_error_for_display,
    handle_errors,
    wrap_pydantic_error,
)
from fakecandy.models import DeviceConfig
from fakecandy.utils import ObserverManager


class TestObserverManager:
    """Test the observer list."""

    @pytest.mark.unit
    def test_notify_all(self):
        manager = ObserverManager[Mock](observer_type_name="test")
        first, second = Mock(), Mock()
        manager.register(first)
        manager.register(second)

        manager.notify("on_event", 1, key="value")

        first.on_event.assert_called_once_with(1, key="value")
        second.on_event.assert_called_once_with(1, key="value")

    @pytest.mark.unit
    def test_register_is_idempotent(self):
        manager = ObserverManager[Mock]()
        observer = Mock()
        manager.register(observer)
        manager.register(observer)

        assert len(manager) == 1
        assert observer in manager

    @pytest.mark.unit
    def test_failing_observer_does_not_stop_others(self, caplog):
        manager = ObserverManager[Mock](observer_type_name="strand")
        broken, healthy = Mock(), Mock()
        broken.on_event.side_effect = RuntimeError("boom")
        manager.register(broken)
        manager.register(healthy)

        manager.notify("on_event")

        healthy.on_event.assert_called_once()
        assert "boom" in caplog.text

    @pytest.mark.unit
    def test_unregister_unknown(self, caplog):
        manager = ObserverManager[Mock](observer_type_name="strand")
        manager.unregister(Mock())
        assert "unknown strand observer" in caplog.text

    @pytest.mark.unit
    def test_observer_may_unregister_itself(self):
        manager = ObserverManager[object]()

        class OneShot:
            def on_event(self):
                manager.unregister(self)

        manager.register(OneShot())
        manager.notify("on_event")

        assert len(manager) == 0

    @pytest.mark.unit
    def test_clear(self):
        manager = ObserverManager[Mock]()
        manager.register(Mock())
        manager.clear()
        assert len(manager) == 0


class TestErrorHandling:
    """Test error translation helpers."""

    @pytest.mark.unit
    def test_str_is_user_message(self):
        error = UnknownChannelError(9, (1, 2))
        assert str(error) == "Unknown OPC channel: 9"
        assert "1, 2" in error.recovery_hint

    @pytest.mark.unit
    def test_technical_message_defaults_to_user_message(self):
        assert FakecandyError("bad").technical_message == "bad"

    @pytest.mark.unit
    def test_format_for_display(self):
        assert format_error_for_display(FakecandyError("bad", recovery_hint="fix it")) == ("bad", "fix it")
        assert format_error_for_display(OSError("refused")) == ("OSError: refused", None)

    @pytest.mark.unit
    def test_handle_errors_swallows(self, caplog):
        @handle_errors(operation_name="close socket", re_raise=False, log_level=logging.WARNING)
        def failing():
            raise FakecandyError("bad thing", technical_message="EBADF on fd 7")

        with caplog.at_level(logging.WARNING):
            assert failing() is None

        assert "Failed to close socket: EBADF on fd 7" in caplog.text

    @pytest.mark.unit
    def test_handle_errors_passes_result(self):
        @handle_errors(operation_name="add")
        def add(a, b):
            return a + b

        assert add(1, b=2) == 3
        assert add.__name__ == "add"

    @pytest.mark.unit
    def test_handle_errors_reraise(self, caplog):
        @handle_errors(operation_name="do thing")
        def failing():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            failing()
        assert "Failed to do thing: ValueError: nope" in caplog.text

    @pytest.mark.unit
    def test_error_context_logs_and_reraises(self, caplog):
        log = logging.getLogger("test.context")

        with pytest.raises(FakecandyError):
            with ErrorContext("start listener", log):
                raise FakecandyError("port busy", technical_message="bind failed: EADDRINUSE")

        assert "Failed to start listener: bind failed: EADDRINUSE" in caplog.text

    @pytest.mark.unit
    def test_error_context_suppresses(self):
        with ErrorContext("optional step", re_raise=False) as ctx:
            raise OSError("gone")
        assert isinstance(ctx.error, OSError)

    @pytest.mark.unit
    def test_wrap_pydantic_single_error(self):
        with pytest.raises(ValidationError) as exc_info:
            DeviceConfig(device_id="d", led_count=0)

        error = wrap_pydantic_error(exc_info.value, "device.json")

        assert isinstance(error, ConfigValidationError)
        assert error.field == "led_count"
        assert error.source == "device.json"
        assert "device.json" in error.recovery_hint
        assert "21845" in error.recovery_hint

    @pytest.mark.unit
    def test_wrap_pydantic_multiple_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            DeviceConfig(device_id="d", led_count=0, channels=[0])

        error = wrap_pydantic_error(exc_info.value, "command line")

        assert error.field == "multiple fields"
        assert "led_count" in error.user_message
        assert "channels" in error.user_message

    @pytest.mark.unit
    def test_wrap_pydantic_invalid_json(self):
        with pytest.raises(ValidationError) as exc_info:
            DeviceConfig.model_validate_json("{,}")

        error = wrap_pydantic_error(exc_info.value, "device.json")

        assert isinstance(error, ConfigFileInvalidError)
        assert "Invalid JSON" not in error.parse_error
        assert "device.json.bak" in error.recovery_hint
