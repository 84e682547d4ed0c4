from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from crateforge.config import ConfigError, WorkspaceConfig, load_config
from crateforge.executor import (
    Attempt,
    ExecutionResult,
    Operation,
    Orchestrator,
    RunSummary,
    TaskRunner,
)
from crateforge.workspace import ProjectUnit, Workspace, WorkspaceError

from .args import build_parser


def main() -> None:
    sys.exit(run_cli())


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        _configure_logging(args.verbose)

        match args.command:
            case "install-all" | "build-all" | "test-all":
                return cmd_run(args, Operation.from_command(args.command))
            case "list":
                return cmd_list(args)
            case _:
                return 2

    except (ConfigError, WorkspaceError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_run(args: argparse.Namespace, operation: Operation) -> int:
    config = load_config(args.config, root=args.workspace)
    summary = _orchestrator(args.workspace, config).run(
        operation, on_start=_echo_start, on_result=_echo_output
    )
    _print_summary(summary)
    return summary.exit_code


def cmd_list(args: argparse.Namespace) -> int:
    config = load_config(args.config, root=args.workspace)
    workspace = Workspace(args.workspace, config.manifest)
    for unit in workspace:
        if unit.has_manifest:
            print(unit.name)
        else:
            print(f"{unit.name} (no {config.manifest})")
    return 0


def _orchestrator(workspace_root: str, config: WorkspaceConfig) -> Orchestrator:
    # Absolute: the toolchain runs with the root as its cwd.
    root = Path(workspace_root).resolve()
    workspace = Workspace(root, config.manifest)
    runner = TaskRunner(config, cwd=root)
    return Orchestrator(
        workspace, runner, strict_manifests=config.strict_manifests
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _label(operation: Operation, attempt: Attempt) -> str:
    if attempt is Attempt.FALLBACK:
        return f"{operation.value} (fallback)"
    return operation.value


def _echo_start(operation: Operation, unit: ProjectUnit, attempt: Attempt) -> None:
    print(f"==> {_label(operation, attempt)} {unit.name}", flush=True)


def _echo_output(result: ExecutionResult) -> None:
    print(result.output, end="", flush=True)


def _print_summary(summary: RunSummary) -> None:
    for unit in summary.skipped:
        print(f"SKIP {unit.name}, no {unit.manifest.name}")

    for result in summary.results():
        line = (
            f"{_label(result.operation, result.attempt)} {result.unit.name}, "
            f"{result.duration_s:.3f}s, exit code = {result.returncode}"
        )
        if result.failure is None:
            print(f"OK {line}")
        else:
            print(f"FAIL {line} [{result.failure.value}]")

    if summary.ok:
        print(f"{summary.operation.command_name}: {len(summary.units)} unit(s) succeeded")
    else:
        failed = ", ".join(result.unit.name for result in summary.failed)
        print(f"{summary.operation.command_name}: failed ({failed or 'skipped units'})")
