# tests/test_cli.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from crateforge.cli import run_cli


def _write_json_config(root: Path, fake_toolchain, **extra) -> Path:
    path = root / "crateforge.json"
    config = {
        "toolchain": fake_toolchain.command,
        "env": {"FAKE_TOOLCHAIN_LOG": str(fake_toolchain.log)},
        **extra,
    }
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def test_list_prints_one_unit_per_line(
    workspace_root: Path, make_unit, capsys: pytest.CaptureFixture[str]
) -> None:
    make_unit("b")
    make_unit("a", manifest=False)

    code = run_cli(["--workspace", str(workspace_root), "list"])
    out = capsys.readouterr().out.splitlines()

    assert code == 0
    assert out == ["a (no Cargo.toml)", "b"]


def test_build_all_executes_and_reports(
    workspace_root: Path,
    make_unit,
    fake_toolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_unit("a")
    make_unit("b")
    _write_json_config(workspace_root, fake_toolchain)

    code = run_cli(["--workspace", str(workspace_root), "build-all"])
    captured = capsys.readouterr()

    assert code == 0
    assert len(fake_toolchain.calls()) == 2
    assert "==> build a" in captured.out
    assert captured.out.index("==> build a") < captured.out.index("fake build a")
    assert captured.out.index("fake build a") < captured.out.index("==> build b")
    assert "fake build a" in captured.out
    assert "diagnostic for b" in captured.out
    assert "OK build a" in captured.out
    assert "OK build b" in captured.out


def test_test_all_failure_returns_toolchain_status(
    workspace_root: Path,
    make_unit,
    fake_toolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_unit("a", fail=("test",))
    make_unit("b")
    _write_json_config(workspace_root, fake_toolchain)

    code = run_cli(["--workspace", str(workspace_root), "test-all"])
    out = capsys.readouterr().out

    assert code == 3
    assert "FAIL test a" in out
    assert "exit code = 3 [UnitTestFailed]" in out
    assert "OK test b" in out


def test_build_all_reports_skipped_units(
    workspace_root: Path,
    make_unit,
    fake_toolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_unit("a", manifest=False)
    make_unit("b")
    _write_json_config(workspace_root, fake_toolchain)

    code = run_cli(["--workspace", str(workspace_root), "build-all"])
    out = capsys.readouterr().out

    assert code == 1
    assert "SKIP a, no Cargo.toml" in out
    assert "OK build b" in out


def test_install_all_runs_fallback_and_keeps_primary_status(
    workspace_root: Path,
    make_unit,
    fake_toolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_unit("a", fail=("install",))
    make_unit("b")
    _write_json_config(workspace_root, fake_toolchain)

    code = run_cli(["--workspace", str(workspace_root), "install-all"])
    out = capsys.readouterr().out

    assert code == 3
    assert "FAIL install a" in out
    assert "OK install (fallback) a" in out
    assert "OK install (fallback) b" in out
    fallback_calls = fake_toolchain.calls()[2:]
    assert [c[c.index("--features") + 1] for c in fallback_calls] == ["log", "log"]
    assert "[UnitInstallFailed]" in out


def test_explicit_config_path(
    workspace_root: Path,
    tmp_path: Path,
    make_unit,
    fake_toolchain,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_unit("a")
    cfg = _write_json_config(tmp_path, fake_toolchain, verbosity=["-q"])

    code = run_cli(
        ["--config", str(cfg), "--workspace", str(workspace_root), "build-all"]
    )
    _ = capsys.readouterr()

    assert code == 0
    assert fake_toolchain.calls()[0][:2] == ["build", "-q"]


def test_missing_workspace_returns_2(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = run_cli(["--workspace", str(tmp_path / "missing"), "build-all"])
    captured = capsys.readouterr()

    assert code == 2
    assert "Workspace unreadable" in captured.err


def test_invalid_config_path_returns_2(
    workspace_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    missing = workspace_root / "missing.json"

    code = run_cli(["--config", str(missing), "--workspace", str(workspace_root), "list"])
    captured = capsys.readouterr()

    assert code == 2
    assert captured.err != ""


def test_unknown_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        run_cli(["deploy-all"])
    assert exc.value.code == 2
