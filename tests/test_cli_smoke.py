"""Smoke tests for CLI commands.

Tests that CLI commands parse correctly and don't crash. Uses Click's
CliRunner; device tests run real listeners on loopback ports.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from fakecandy.cli.main import cli
from fakecandy.device import OpcHandler, StrandStore
from fakecandy.discovery import encode_discovery_response
from fakecandy.models import AppConfig, ControlKind, DeviceConfig, DiscoveryKind, UdpScanData
from fakecandy.transports import TcpControlServer


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def device():
    """TCP listener for a one-strand device with 8 LEDs."""
    store = StrandStore([1], led_count=8)
    server = TcpControlServer(OpcHandler(store), "127.0.0.1", 0)
    server.start()
    yield store, server.address[1]
    server.stop()


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        """Test main CLI help displays."""
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'simulated Open Pixel Control' in result.output
        for command in ('serve', 'probe', 'control'):
            assert command in result.output

    def test_version_flag(self, runner):
        """Test --version flag works."""
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.1.0' in result.output

    def test_serve_help(self, runner):
        result = runner.invoke(cli, ['serve', '--help'])
        assert result.exit_code == 0
        assert '--device-id' in result.output
        assert '--udp-discovery-packet' in result.output

    def test_control_help(self, runner):
        result = runner.invoke(cli, ['control', '--help'])
        assert result.exit_code == 0
        for command in ('color', 'power', 'brightness', 'query'):
            assert command in result.output


@pytest.mark.integration
class TestServeCommand:
    """Test configuration handling of the serve command without running a device."""

    def test_requires_device_id(self, runner):
        result = runner.invoke(cli, ['serve'])
        assert result.exit_code != 0
        assert '--device-id is required' in result.output

    def test_options_build_config(self, runner):
        with patch('fakecandy.device.server.DeviceServer') as mock_server:
            result = runner.invoke(cli, [
                'serve', '--device-id', 'proxy1', '--channel', '1', '--channel', '2',
                '-c', 'udp', '-d', 'MDNS', '--opc-port', '7000', '--no-display',
            ])

        assert result.exit_code == 0, result.output
        config: AppConfig = mock_server.call_args.args[0]
        assert config.device.device_id == 'proxy1'
        assert config.device.channels == [1, 2]
        assert config.control.protocol == ControlKind.UDP
        assert config.control.port == 7000
        assert config.discovery.protocol == DiscoveryKind.MDNS
        assert not config.display
        mock_server.return_value.run.assert_called_once()

    def test_config_file_with_override(self, runner, tmp_path: Path):
        """Explicit options override the file; defaults do not."""
        config_path = tmp_path / 'device.json'
        AppConfig(device=DeviceConfig(device_id='strand9', led_count=4)).save(config_path)

        with patch('fakecandy.device.server.DeviceServer') as mock_server:
            result = runner.invoke(cli, ['serve', '--config', str(config_path), '--opc-port', '9000'])

        assert result.exit_code == 0, result.output
        config: AppConfig = mock_server.call_args.args[0]
        assert config.device.device_id == 'strand9'
        assert config.device.led_count == 4
        assert config.control.port == 9000

    def test_save_config(self, runner, tmp_path: Path):
        config_path = tmp_path / 'saved.json'

        with patch('fakecandy.device.server.DeviceServer'):
            result = runner.invoke(cli, [
                'serve', '--device-id', 'strand1', '--led-count', '5', '--save-config', str(config_path),
            ])

        assert result.exit_code == 0, result.output
        assert AppConfig.load(config_path).device.led_count == 5

    def test_invalid_value_is_reported(self, runner):
        result = runner.invoke(cli, ['serve', '--device-id', 'd', '--channel', '0'])
        assert result.exit_code == 1
        assert 'ERROR:' in result.output
        assert 'channels' in result.output

    def test_udp_led_count_limit(self, runner):
        result = runner.invoke(cli, ['serve', '--device-id', 'd', '-c', 'UDP', '--led-count', '21845'])
        assert result.exit_code == 1
        assert 'UDP datagram' in result.output

    def test_invalid_config_file(self, runner, tmp_path: Path):
        config_path = tmp_path / 'broken.json'
        config_path.write_text('{"device": {"device_id": "d",}}', encoding='utf-8')

        result = runner.invoke(cli, ['serve', '--config', str(config_path)])

        assert result.exit_code == 1
        assert 'ERROR:' in result.output


@pytest.mark.integration
class TestControlCommand:
    """Test control commands against a running TCP listener."""

    def test_color(self, runner, device):
        store, port = device

        result = runner.invoke(cli, ['control', '--port', str(port), '--leds', '8', 'color', 'ff00ff'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output.strip().splitlines()[-1]) == {
            'color': {'spectrumRGB': 0xFF00FF},
            'online': True,
        }
        assert store.get_pixels(1) == bytes.fromhex('ff00ff') * 8

    def test_query(self, runner, device):
        store, port = device
        store.set_pixels(1, bytes.fromhex('00ff00') * 8)

        result = runner.invoke(cli, ['control', '--port', str(port), 'query'])

        assert result.exit_code == 0, result.output
        assert '"hex": "#00FF00"' in result.output

    def test_invalid_color(self, runner):
        result = runner.invoke(cli, ['control', 'color', 'purple'])
        assert result.exit_code != 0
        assert 'not an RGB color' in result.output

    def test_brightness_range(self, runner):
        result = runner.invoke(cli, ['control', 'brightness', '150'])
        assert result.exit_code != 0

    def test_strand_longer_than_one_frame(self, runner):
        result = runner.invoke(cli, ['control', '--leds', '30000', 'color', 'ff00ff'])
        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)
        assert '--leds' in result.output

    def test_strand_longer_than_one_datagram(self, runner):
        result = runner.invoke(cli, ['control', '--protocol', 'udp', '--leds', '21840', 'color', 'ff00ff'])
        assert result.exit_code == 2
        assert 'UDP datagram' in result.output

    def test_unreachable_device(self, runner):
        result = runner.invoke(cli, ['control', '--port', '1', '--timeout', '0.5', 'power', 'on'])
        assert result.exit_code == 1
        assert 'ERROR:' in result.output


@pytest.mark.integration
class TestProbeCommand:
    """Test the probe command with discovery mocked out."""

    def test_no_devices(self, runner):
        with patch('fakecandy.discovery.probe', return_value=[]):
            result = runner.invoke(cli, ['probe', '--timeout', '0.1'])
        assert result.exit_code == 0
        assert 'No devices found' in result.output

    def test_json_output(self, runner, record):
        """Undecodable replies are skipped."""
        scans = [UdpScanData(data=b'\x00'), UdpScanData(data=encode_discovery_response(record))]
        with patch('fakecandy.discovery.probe', return_value=scans):
            result = runner.invoke(cli, ['probe', '--json'])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output.strip().splitlines()[-1])
        assert payload['id'] == 'dev1'
        assert payload['isProxy'] is True
