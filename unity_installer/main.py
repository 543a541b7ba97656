from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import InstallerConfig, load_config
from .discovery import InstallationScanner
from .errors import AmbiguousInstallation, NotInstalled, exit_code_for_exception
from .lifecycle import InstallLifecycle
from .logging_utils import configure_logging
from .models import InstallQueue, Installation, Package, UnityVersion
from .pipeline import run_queue
from .platforms import current_layout, default_runner

logger = logging.getLogger(__name__)


def build_lifecycle(config: InstallerConfig) -> InstallLifecycle:
    layout = current_layout().with_extra_roots(config.extra_scan_roots)
    runner = default_runner(layout, elevation_command=config.elevation_command)
    return InstallLifecycle(layout, runner, InstallationScanner(layout))


def _parse_package(spec: str) -> Package:
    name, sep, path = spec.partition("=")
    if not sep or not name or not path:
        raise argparse.ArgumentTypeError(f"Expected NAME=PATH, got {spec!r}")
    return Package(name=name.strip(), file_path=path.strip())


def _select(lifecycle: InstallLifecycle, version: UnityVersion, path: Optional[str]) -> Installation:
    matches = lifecycle.scanner.find_version(version)
    if path:
        matches = [i for i in matches if i.path == path]
    if not matches:
        raise NotInstalled(f"Version {version} is not installed")
    if len(matches) > 1:
        paths = ", ".join(i.path for i in matches)
        raise AmbiguousInstallation(f"Version {version} is installed more than once ({paths}); pass --path")
    return matches[0]


def cmd_list(lifecycle: InstallLifecycle, args: argparse.Namespace) -> int:
    for inst in lifecycle.scanner.find_installations():
        print(f"{inst.version}\t{inst.path}")
    return 0


def cmd_install(lifecycle: InstallLifecycle, args: argparse.Namespace) -> int:
    queue = InstallQueue.of(UnityVersion.parse(args.version), list(args.package))
    install_paths = args.install_path or lifecycle.layout.default_install_paths
    result = run_queue(lifecycle, queue, install_paths)
    if result.installation is not None:
        print(f"{result.installation.version}\t{result.installation.path}")
    return 0


def cmd_uninstall(lifecycle: InstallLifecycle, args: argparse.Namespace) -> int:
    inst = _select(lifecycle, UnityVersion.parse(args.version), args.path)
    lifecycle.uninstall(inst)
    return 0


def cmd_move(lifecycle: InstallLifecycle, args: argparse.Namespace) -> int:
    inst = _select(lifecycle, UnityVersion.parse(args.version), args.path)
    moved = lifecycle.move_installation(inst, args.new_path)
    print(f"{moved.version}\t{moved.path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="unity-installer")
    p.add_argument("--config", default=None, help="Path to settings (json|yaml)")
    p.add_argument("--log", default=None, help="Path to log file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("list", help="List discovered installations")
    s.set_defaults(func=cmd_list)

    s = sub.add_parser("install", help="Install downloaded packages for a version")
    s.add_argument("version", help="e.g. 2021.3.5f1")
    s.add_argument(
        "--package",
        action="append",
        type=_parse_package,
        required=True,
        help="NAME=PATH of a downloaded installer (repeatable; editor is 'Unity')",
    )
    s.add_argument("--install-path", default=None, help="';'-separated install path templates")
    s.set_defaults(func=cmd_install)

    s = sub.add_parser("uninstall", help="Uninstall a discovered version")
    s.add_argument("version")
    s.add_argument("--path", default=None, help="Pick one of several installs of the version")
    s.set_defaults(func=cmd_uninstall)

    s = sub.add_parser("move", help="Move a discovered installation")
    s.add_argument("version")
    s.add_argument("new_path")
    s.add_argument("--path", default=None)
    s.set_defaults(func=cmd_move)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    level = logging.DEBUG if args.verbose else config.log_level
    configure_logging(log_path=args.log or config.log_path, level=level)

    lifecycle = build_lifecycle(config)
    if args.command == "install" and args.install_path is None:
        args.install_path = config.install_paths

    try:
        return args.func(lifecycle, args)
    except Exception as e:
        logger.error("%s failed: %s", args.command, e)
        return exit_code_for_exception(e)


if __name__ == "__main__":
    sys.exit(main())
