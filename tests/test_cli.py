"""Tests for the command line interface."""

from click.testing import CliRunner

from builders import EntrySpec, compressed_entry, create_bnd4, create_dcx
from souls_toolkit import __version__
from souls_toolkit.bnd4 import EntryFlags
from souls_toolkit.cli import main

ENTRIES = [
    EntrySpec(name="N:\\GR\\data\\menu\\a.gfx", data=b"alpha"),
    compressed_entry("N:\\GR\\data\\menu\\b.gfx", b"bravo" * 10),
]


class TestDCXCommand:
    """Tests for the dcx command."""

    def test_decompress(self, tmp_path):
        source = tmp_path / "menu.gfx.dcx"
        source.write_bytes(create_dcx(b"hello world"))

        result = CliRunner().invoke(main, ["dcx", str(source)])

        assert result.exit_code == 0, result.output
        assert "DFLT" in result.output
        assert (tmp_path / "menu.gfx").read_bytes() == b"hello world"

    def test_explicit_output(self, tmp_path):
        source = tmp_path / "blob"
        source.write_bytes(create_dcx(b"data"))
        target = tmp_path / "out.bin"

        result = CliRunner().invoke(main, ["dcx", str(source), "-o", str(target)])

        assert result.exit_code == 0, result.output
        assert target.read_bytes() == b"data"

    def test_unsupported_algorithm(self, tmp_path):
        source = tmp_path / "kraken.dcx"
        source.write_bytes(create_dcx(b"data", algorithm=b"KRAK"))

        result = CliRunner().invoke(main, ["dcx", str(source)])

        assert result.exit_code == 1
        assert "Unsupported DCX compression algorithm" in result.output


class TestExtractCommand:
    """Tests for the extract command."""

    def test_list_only(self, tmp_path):
        archive = tmp_path / "menu.bnd"
        archive.write_bytes(create_bnd4(ENTRIES))

        result = CliRunner().invoke(main, ["extract", str(archive), "--list-only"])

        assert result.exit_code == 0, result.output
        assert "Files in archive (2)" in result.output
        assert "a.gfx (5 bytes)" in result.output

    def test_extract_dcx_wrapped_archive(self, tmp_path):
        archive = tmp_path / "menu.bnd.dcx"
        archive.write_bytes(create_dcx(create_bnd4(ENTRIES)))

        result = CliRunner().invoke(main, ["extract", str(archive)])

        assert result.exit_code == 0, result.output
        assert "Decompressing DCX container" in result.output
        assert "Extracted: 2 files" in result.output
        output = tmp_path / "menu_extracted"
        assert (output / "GR" / "data" / "menu" / "a.gfx").read_bytes() == b"alpha"
        assert (output / "GR" / "data" / "menu" / "b.gfx").read_bytes() == b"bravo" * 10

    def test_reports_skipped_entries(self, tmp_path):
        entries = [
            EntrySpec(name="k.bin", data=create_dcx(b"x", algorithm=b"EDGE"), flags=EntryFlags.COMPRESSED),
            EntrySpec(name="r.bin", data=b"raw"),
        ]
        archive = tmp_path / "mixed.bnd"
        archive.write_bytes(create_bnd4(entries))

        result = CliRunner().invoke(main, ["extract", str(archive), "-o", str(tmp_path / "out")])

        assert result.exit_code == 0, result.output
        assert "Extracted: 1 files" in result.output
        assert "Skipped:   1 files" in result.output

    def test_invalid_archive(self, tmp_path):
        archive = tmp_path / "bad.bnd"
        archive.write_bytes(b"BND3" + b"\x00" * 60)

        result = CliRunner().invoke(main, ["extract", str(archive)])

        assert result.exit_code == 1
        assert "Error:" in result.output


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert __version__ in result.output
