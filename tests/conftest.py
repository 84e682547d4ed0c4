from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from crateforge.config.types import WorkspaceConfig

# Stands in for the package manager: records its argv, prints a line on stdout
# and one on stderr, and exits 3 when the unit holds a ``fail-<subcommand>``
# marker (``fail-install-fallback`` for the --features attempt). A
# ``raw-output`` marker adds bytes that are not valid UTF-8, and a
# ``kill-<subcommand>`` marker makes it die from SIGTERM instead of exiting.
FAKE_TOOLCHAIN = """\
import json
import os
import signal
import sys
from pathlib import Path

args = sys.argv[1:]
with open(os.environ["FAKE_TOOLCHAIN_LOG"], "a", encoding="utf-8") as fh:
    fh.write(json.dumps(args) + "\\n")

if "--path" in args:
    target = Path(args[args.index("--path") + 1])
else:
    target = Path(args[args.index("--manifest-path") + 1]).parent

marker = "fail-" + args[0]
if "--features" in args:
    marker += "-fallback"

print("fake", args[0], target.name)
print("diagnostic for", target.name, file=sys.stderr)

if (target / "raw-output").exists():
    sys.stdout.flush()
    sys.stdout.buffer.write(b"caf\\xe9 \\xff\\n")
    sys.stdout.flush()

if (target / ("kill-" + args[0])).exists():
    sys.stdout.flush()
    os.kill(os.getpid(), signal.SIGTERM)

sys.exit(3 if (target / marker).exists() else 0)
"""


@dataclass
class FakeToolchain:
    command: list[str]
    log: Path

    def calls(self) -> list[list[str]]:
        if not self.log.exists():
            return []
        return [
            json.loads(line)
            for line in self.log.read_text(encoding="utf-8").splitlines()
        ]

    def config(self, **overrides) -> WorkspaceConfig:
        return WorkspaceConfig(
            toolchain=list(self.command),
            env={"FAKE_TOOLCHAIN_LOG": str(self.log)},
            **overrides,
        )


@pytest.fixture
def fake_toolchain(tmp_path: Path) -> FakeToolchain:
    tools = tmp_path / "tools"
    tools.mkdir()
    script = tools / "fake_cargo.py"
    script.write_text(FAKE_TOOLCHAIN, encoding="utf-8")
    return FakeToolchain([sys.executable, str(script)], tools / "calls.jsonl")


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "ws"
    root.mkdir()
    return root


@pytest.fixture
def make_unit(workspace_root: Path):
    """
    make_unit(name, manifest=True, fail=("build", "install", ...), markers=()) -> unit dir
    """

    def _make(
        name: str,
        *,
        manifest: bool = True,
        fail: tuple[str, ...] = (),
        markers: tuple[str, ...] = (),
    ) -> Path:
        unit = workspace_root / name
        unit.mkdir()
        if manifest:
            (unit / "Cargo.toml").write_text(
                f'[package]\nname = "{name}"\n', encoding="utf-8"
            )
        for what in fail:
            (unit / f"fail-{what}").write_text("", encoding="utf-8")
        for marker in markers:
            (unit / marker).write_text("", encoding="utf-8")
        return unit

    return _make
