"""Tests for toolchain location and search-path patching."""

import os
import stat
from pathlib import Path

import pytest

from buildwatch.builder.environment_manager import (
    EnvironmentPatcher,
    NullToolchainLocator,
    SearchPathToolchainLocator,
)
from buildwatch.common.exceptions.build_exceptions import ToolchainNotFoundError
from tests.helpers import StaticLocator


def _make_executable(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# ── EnvironmentPatcher ──────────────────────────────────────────────


def test_apply_prepends_missing_entries() -> None:
    environ = {"PATH": "/usr/bin:/bin"}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    patch = patcher.apply()

    assert patch.patched
    assert patch.previous == "/usr/bin:/bin"
    assert environ["PATH"] == "/opt/tc/bin:/usr/bin:/bin"


def test_restore_is_byte_for_byte() -> None:
    original = "/usr/bin::/weird path/;x:"
    environ = {"PATH": original}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    patch = patcher.apply()
    # empty elements (the working directory on POSIX) survive while patched
    assert environ["PATH"] == "/opt/tc/bin:" + original

    patcher.restore(patch)
    assert environ["PATH"] == original


def test_restore_unsets_previously_missing_variable() -> None:
    environ = {}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    patch = patcher.apply()
    assert environ["PATH"] == "/opt/tc/bin"

    patcher.restore(patch)
    assert "PATH" not in environ


def test_entries_already_present_are_not_patched() -> None:
    environ = {"PATH": "/opt/tc/bin:/usr/bin"}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    patch = patcher.apply()

    assert not patch.patched
    assert environ["PATH"] == "/opt/tc/bin:/usr/bin"


def test_apply_twice_keeps_original_value() -> None:
    environ = {"PATH": "/usr/bin"}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    first = patcher.apply()
    second = patcher.apply()

    assert second is first
    assert second.previous == "/usr/bin"
    patcher.restore(second)
    assert environ["PATH"] == "/usr/bin"


def test_restore_is_noop_when_unpatched_or_repeated() -> None:
    environ = {"PATH": "/usr/bin"}
    patcher = EnvironmentPatcher(StaticLocator(["/opt/tc/bin"]), environ=environ, separator=":")

    patcher.restore(None)
    patch = patcher.apply()
    patcher.restore(patch)
    environ["PATH"] = "/changed/later"
    patcher.restore(patch)

    assert environ["PATH"] == "/changed/later"
    assert patcher.active_patch is None


def test_missing_toolchain_is_a_warning() -> None:
    environ = {"PATH": "/usr/bin"}
    patcher = EnvironmentPatcher(StaticLocator(missing=True), environ=environ, separator=":")

    patch = patcher.apply()

    assert not patch.patched
    assert patch.warning == "WARNING: toolchain missing\n"
    assert environ["PATH"] == "/usr/bin"


def test_null_locator_never_patches() -> None:
    environ = {"PATH": "/usr/bin"}
    patch = EnvironmentPatcher(NullToolchainLocator(), environ=environ).apply()

    assert not patch.patched
    assert patch.warning is None


def test_patches_custom_variable() -> None:
    environ = {"LD_LIBRARY_PATH": "/usr/lib"}
    patcher = EnvironmentPatcher(
        StaticLocator(["/opt/tc/lib"]), variable="LD_LIBRARY_PATH", environ=environ, separator=":"
    )

    patcher.apply()

    assert environ["LD_LIBRARY_PATH"] == "/opt/tc/lib:/usr/lib"
    assert "PATH" not in environ


# ── SearchPathToolchainLocator ──────────────────────────────────────


@pytest.mark.skipif(os.name == "nt", reason="POSIX executable bits")
def test_locator_finds_nothing_to_do_when_on_path(tmp_path: Path) -> None:
    bin_dir = tmp_path / "bin"
    _make_executable(bin_dir, "gcc")

    location = SearchPathToolchainLocator(["gcc"], separator=":").locate(str(bin_dir))

    assert location.entries == []


@pytest.mark.skipif(os.name == "nt", reason="POSIX executable bits")
def test_locator_returns_search_directory(tmp_path: Path) -> None:
    tc_dir = tmp_path / "toolchain" / "bin"
    _make_executable(tc_dir, "gcc")
    _make_executable(tc_dir, "g++")

    locator = SearchPathToolchainLocator(["gcc", "g++"], search_paths=[str(tc_dir)], separator=":")
    location = locator.locate(str(tmp_path / "empty"))

    assert location.entries == [str(tc_dir)]


def test_locator_raises_when_missing(tmp_path: Path) -> None:
    locator = SearchPathToolchainLocator(["no-such-cc"], search_paths=[str(tmp_path)], separator=":")

    with pytest.raises(ToolchainNotFoundError) as exc_info:
        locator.locate("")

    assert exc_info.value.missing_executables == ["no-such-cc"]
    assert "no-such-cc" in exc_info.value.message
