"""Unit tests for pwa_scaffold.utils helpers."""

from __future__ import annotations

import os
import stat
import sys

import pytest

from pwa_scaffold.utils import format_duration, run_command, slugify, write_text_atomic

pytestmark = pytest.mark.unit


class TestSlugify:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("My PWA Project", "my-pwa-project"),
            ("  Control de Obras!  ", "control-de-obras"),
            ("already-ok", "already-ok"),
            ("a__b..c", "a__b..c"),
            ("--edge--", "edge"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, raw, expected):
        assert slugify(raw) == expected


class TestFormatDuration:
    def test_seconds(self):
        assert format_duration(3.7) == "3.7s"

    def test_minutes(self):
        assert format_duration(65.2) == "1m 5s"

    def test_hours(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    def test_negative(self):
        assert format_duration(-1) == "0.0s"


class TestWriteTextAtomic:
    def test_writes_new_file(self, tmp_path):
        target = tmp_path / "out.txt"
        write_text_atomic(target, "hello\n")
        assert target.read_text() == "hello\n"

    def test_overwrites_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "out.txt"
        target.write_text("old")
        write_text_atomic(target, "new")
        assert target.read_text() == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_preserves_newlines_verbatim(self, tmp_path):
        target = tmp_path / "crlf.txt"
        write_text_atomic(target, "a\r\nb\n")
        assert target.read_bytes() == b"a\r\nb\n"

    def test_keeps_existing_mode(self, tmp_path):
        target = tmp_path / "package.json"
        target.write_text("{}")
        target.chmod(0o644)
        write_text_atomic(target, "{}\n")
        assert stat.S_IMODE(target.stat().st_mode) == 0o644

        target.chmod(0o640)
        write_text_atomic(target, "{}\n")
        assert stat.S_IMODE(target.stat().st_mode) == 0o640

    def test_new_file_mode_follows_umask(self, tmp_path):
        previous = os.umask(0o022)
        try:
            target = tmp_path / "manifest.json"
            write_text_atomic(target, "{}\n")
        finally:
            os.umask(previous)
        assert stat.S_IMODE(target.stat().st_mode) == 0o644

    def test_missing_parent_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            write_text_atomic(tmp_path / "missing" / "out.txt", "x")


class TestRunCommand:
    async def test_success_captures_output(self, tmp_path):
        rc, out, err = await run_command(
            [sys.executable, "-c", "print('hi')"], cwd=tmp_path
        )
        assert rc == 0
        assert out == "hi"
        assert err == ""

    async def test_nonzero_exit(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )
        assert rc == 3
        assert err == "boom"

    async def test_missing_binary(self):
        rc, _, err = await run_command(["definitely-not-a-real-binary-xyz"])
        assert rc == 127
        assert "Command not found" in err

    async def test_timeout(self):
        rc, _, err = await run_command(
            [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
        )
        assert rc == -1
        assert "timed out" in err
