"""Tests for the command line interface."""

import gzip

from typer.testing import CliRunner

from cli.app import app
from vgmswan import __version__
from vgmswan.utils.checksum import verify_image_checksum
from vgm_builder import build_vgm, port, wait

runner = CliRunner()


class TestCompileCommand:
    """Test `vgmswan compile`."""

    def test_compile(self, tmp_path, minimal_vgm_file):
        output = tmp_path / "out" / "songs.bin"
        result = runner.invoke(app, ["compile", str(minimal_vgm_file), "-o", str(output)])

        assert result.exit_code == 0
        assert "Compiled" in result.output
        assert output.read_bytes() == bytes([0x03, 0x00, 0x00, 0xF8, 0x78, 0xFA, 0x03, 0x00, 0x00])

    def test_compile_image(self, tmp_path, minimal_vgm_file, firmware):
        engine = tmp_path / "engine.bin"
        engine.write_bytes(firmware)
        output = tmp_path / "music.ws"

        result = runner.invoke(
            app, ["compile", str(minimal_vgm_file), "-o", str(output), "-t", "-f", str(engine)]
        )

        assert result.exit_code == 0
        data = output.read_bytes()
        assert len(data) == 128 * 1024
        assert verify_image_checksum(data)

    def test_image_without_firmware(self, tmp_path, minimal_vgm_file):
        output = tmp_path / "music.ws"
        result = runner.invoke(app, ["compile", str(minimal_vgm_file), "-o", str(output), "-t"])

        assert result.exit_code == 1
        assert not output.exists()

    def test_missing_file(self, tmp_path):
        output = tmp_path / "songs.bin"
        result = runner.invoke(app, ["compile", str(tmp_path / "nope.vgm"), "-o", str(output)])

        assert result.exit_code == 1
        assert not output.exists()

    def test_missing_inputs(self, tmp_path):
        output = tmp_path / "songs.bin"
        result = runner.invoke(app, ["compile", "-o", str(output)])

        assert result.exit_code == 1
        assert "Missing input files" in result.output
        assert "Usage" in result.output
        assert not output.exists()

    def test_missing_output(self, minimal_vgm_file):
        result = runner.invoke(app, ["compile", str(minimal_vgm_file)])

        assert result.exit_code == 1
        assert "Missing --output" in result.output
        assert "Usage" in result.output

    def test_corrupt_gzip(self, tmp_path, minimal_vgm):
        broken = tmp_path / "broken.vgz"
        broken.write_bytes(gzip.compress(minimal_vgm)[:-12])
        output = tmp_path / "songs.bin"

        result = runner.invoke(app, ["compile", str(broken), "-o", str(output)])

        assert result.exit_code == 1
        assert "Corrupt compressed VGM file" in result.output
        assert not output.exists()

    def test_port_outside_sound_ports(self, tmp_path):
        bad = tmp_path / "bad.vgm"
        bad.write_bytes(build_vgm(port(0xC0, 0x01) + wait(441)))
        output = tmp_path / "songs.bin"

        result = runner.invoke(app, ["compile", str(bad), "-o", str(output)])

        assert result.exit_code == 1
        assert "Unsupported WonderSwan port address: C0" in result.output
        assert not output.exists()

    def test_invalid_file(self, tmp_path):
        bad = tmp_path / "bad.vgm"
        bad.write_bytes(b"RIFF" + bytes(0x40))
        output = tmp_path / "songs.bin"

        result = runner.invoke(app, ["compile", str(bad), "-o", str(output)])

        assert result.exit_code == 1
        assert "Invalid VGM header" in result.output
        assert not output.exists()


class TestInfoCommand:
    """Test `vgmswan info`."""

    def test_info(self, minimal_vgm_file):
        result = runner.invoke(app, ["info", str(minimal_vgm_file)])

        assert result.exit_code == 0
        assert "1.71" in result.output
        assert "Frames" in result.output

    def test_header_only(self, minimal_vgm_file):
        result = runner.invoke(app, ["info", str(minimal_vgm_file), "--header"])

        assert result.exit_code == 0
        assert "1.71" in result.output
        assert "Command Stream" not in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "nope.vgm")])
        assert result.exit_code == 1

    def test_missing_argument(self):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 1
        assert "Missing capture log" in result.output


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
