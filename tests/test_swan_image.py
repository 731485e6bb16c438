"""Tests for flashable image assembly."""

import pytest

from vgmswan.errors import ImageTooLarge, InvalidFirmwareAsset
from vgmswan.formats.swan.image import FirmwareAsset, ImageAssembler, select_rom_size
from vgmswan.utils.checksum import additive_checksum, fill_checksum, verify_image_checksum


class TestChecksum:
    """Test the 16-bit additive checksum."""

    def test_sum_wraps(self):
        assert additive_checksum(b"\xff" * 258) == (255 * 258) & 0xFFFF

    def test_running_sum(self):
        assert additive_checksum(b"\x02", additive_checksum(b"\x01")) == 3

    def test_fill(self):
        assert fill_checksum(0x200, 0xFF) == (0x200 * 0xFF) & 0xFFFF

    def test_verify(self):
        body = b"\x10\x20\x30"
        assert verify_image_checksum(body + bytes([0x60, 0x00]))
        assert not verify_image_checksum(body + bytes([0x61, 0x00]))


class TestRomSize:
    """Test image size selection."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (1, (128 * 1024, 0)),
            (128 * 1024, (128 * 1024, 0)),
            (128 * 1024 + 1, (256 * 1024, 1)),
            (3 * 1024 * 1024, (4 * 1024 * 1024, 6)),
            (16 * 1024 * 1024, (16 * 1024 * 1024, 9)),
        ],
    )
    def test_select_rom_size(self, size, expected):
        assert select_rom_size(size) == expected

    def test_too_large(self):
        with pytest.raises(ImageTooLarge):
            select_rom_size(16 * 1024 * 1024 + 1)


class TestImageAssembler:
    """Test image layout and patching."""

    def test_assemble(self, firmware):
        data = bytes([3, 0, 0, 0xFF, 0xFF, 0xFF, 0xF0, 0xFA, 6, 0, 0])
        assembler = ImageAssembler(FirmwareAsset(firmware))
        image = assembler.assemble(data)

        assert len(image) == 128 * 1024
        assert image.startswith(data)
        assert image[len(data)] == 0xFF
        assert image[-len(firmware) : -6] == firmware[:-6]
        assert image[-6] == 0
        assert verify_image_checksum(image)
        assert assembler.checksum == image[-2] | (image[-1] << 8)

    def test_size_class_patched(self, firmware):
        data = bytes(200 * 1024)
        image = ImageAssembler(FirmwareAsset(firmware)).assemble(data)

        assert len(image) == 256 * 1024
        assert image[-6] == 1
        assert verify_image_checksum(image)

    def test_input_firmware_untouched(self, firmware):
        asset = FirmwareAsset(firmware)
        ImageAssembler(asset).assemble(b"\x01\x02")
        assert asset.data == firmware

    def test_short_firmware_rejected(self):
        with pytest.raises(InvalidFirmwareAsset):
            ImageAssembler(FirmwareAsset(b"\x00\x01\x02"))

    def test_load_firmware(self, tmp_path, firmware):
        path = tmp_path / "engine.bin"
        path.write_bytes(firmware)
        assert FirmwareAsset.load(path).data == firmware
