"""Unit tests for utility functions (universal_dev_env.utils).

Tests cover:
- run_command (success, failure, timeout, list vs string, env vars)
- command_exists
- dump_json
- write_text / make_executable
- format_size
- Rich output helpers
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import pytest
from rich.progress import Progress

from universal_dev_env.utils import (
    command_exists,
    create_progress,
    dump_json,
    format_size,
    make_executable,
    print_error,
    print_header,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
    write_text,
)

PYTHON = sys.executable


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command(["echo", "hello"])
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command_string(self):
        returncode, stdout, stderr = await run_command("echo hello")
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, _, _ = await run_command([PYTHON, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_timeout(self):
        returncode, _, stderr = await run_command(
            [PYTHON, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_env(self):
        returncode, stdout, _ = await run_command(
            [PYTHON, "-c", "import os; print(os.environ['UDE_TEST_VAR'])"],
            env={"UDE_TEST_VAR": "test_value"},
        )
        assert returncode == 0
        assert stdout == "test_value"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_cwd(self, tmp_path: Path):
        returncode, stdout, _ = await run_command(
            [PYTHON, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()


class TestCommandExists:
    @pytest.mark.unit
    def test_existing(self):
        assert command_exists(Path(PYTHON).name) or command_exists("sh")

    @pytest.mark.unit
    def test_missing(self):
        assert not command_exists("definitely-not-a-command-12345")


# ---------------------------------------------------------------------------
# JSON and file helpers
# ---------------------------------------------------------------------------


class TestJson:
    @pytest.mark.unit
    def test_dump_json_format(self):
        assert dump_json({"a": 1}) == '{\n  "a": 1\n}\n'

    @pytest.mark.unit
    def test_dump_json_keeps_unicode(self):
        assert "🤖" in dump_json({"msg": "🤖"})

    @pytest.mark.unit
    def test_dump_json_stringifies_paths(self, tmp_path: Path):
        assert json.loads(dump_json({"root": tmp_path})) == {"root": str(tmp_path)}


class TestFileHelpers:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_write_text(self, tmp_path: Path):
        path = await write_text(tmp_path / "sub" / "file.txt", "content")
        assert path.read_text(encoding="utf-8") == "content"

    @pytest.mark.unit
    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_make_executable(self, tmp_path: Path):
        path = tmp_path / "script.sh"
        path.write_text("#!/bin/sh\n", encoding="utf-8")
        path.chmod(0o644)
        make_executable(path)
        assert os.access(path, os.X_OK)


class TestFormatSize:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5.0 MB"), (3 * 1024 ** 3, "3.0 GB")],
    )
    def test_format_size(self, size, expected):
        assert format_size(size) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutputHelpers:
    @pytest.mark.unit
    def test_print_helpers_do_not_raise(self):
        print_header("Header")
        print_summary_table({"Key": "Value"}, title="Test")
        print_success("ok")
        print_error("bad")
        print_warning("careful")
        print_info("fyi")

    @pytest.mark.unit
    def test_create_progress(self):
        progress = create_progress()
        assert isinstance(progress, Progress)
        with progress:
            task = progress.add_task("Working...", total=None)
            assert task is not None
