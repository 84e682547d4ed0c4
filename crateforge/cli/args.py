from __future__ import annotations

import argparse

from crateforge.executor import Operation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crateforge")

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: crateforge.{toml,yaml,yml,json} in the workspace)",
    )
    parser.add_argument(
        "--workspace",
        default=".",
        help="Workspace root holding the sub-projects (default: current directory)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    subparsers.add_parser(
        Operation.INSTALL.command_name,
        help="Install the binaries of every sub-project, with a fallback pass on failure",
    )
    subparsers.add_parser(
        Operation.BUILD.command_name, help="Build every sub-project with a manifest"
    )
    subparsers.add_parser(
        Operation.TEST.command_name, help="Test every sub-project with a manifest"
    )

    # list
    subparsers.add_parser("list", help="List sub-projects")

    return parser
