import argparse
import asyncio
import sys
from pathlib import Path

import Build_Verify.cli.commands as commands_cli
from Build_Verify.core.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="Build_Verify",
        description="Build a project and compare its output against recorded hashes.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--manifest", type=str, default=None, help="manifest file (default manifest.yml)")
    common.add_argument("--baseline", type=str, default=None, help="baseline file (default hashes.txt)")
    common.add_argument("--backend", type=str, default=None, help="project backend name")
    common.add_argument("--algorithm", type=str, default=None, help="hash algorithm (default sha1)")
    common.add_argument("--workers", type=int, default=None, help="hashing threads (default 8)")
    common.add_argument("--exclude", action="append", default=[], help="pattern never fingerprinted")
    common.add_argument("--no-build", action="store_true", help="hash the existing output directory")
    common.add_argument("-v", "--verbose", action="count", default=0)

    verify_common = argparse.ArgumentParser(add_help=False, parents=[common])
    verify_common.add_argument("--ignore", action="append", default=[], help="pattern exempt from added/removed")
    verify_common.add_argument("-q", "--quiet", action="store_true", help="hide matching files")

    p = sub.add_parser("verify", parents=[verify_common], help="verify one project")
    p.add_argument("project", type=str, nargs="?", default=".")

    p = sub.add_parser("record", parents=[common], help="record a new baseline")
    p.add_argument("project", type=str, nargs="?", default=".")

    p = sub.add_parser("suite", parents=[verify_common], help="verify every project under a directory")
    p.add_argument("project", type=str, nargs="?", default=".")

    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    return asyncio.run(
        commands_cli.run(
            args.command,
            Path(args.project),
            build=not args.no_build,
            quiet=getattr(args, "quiet", False),
            manifest=args.manifest,
            baseline=args.baseline,
            backend=args.backend,
            algorithm=args.algorithm,
            workers=args.workers,
            ignore_patterns=getattr(args, "ignore", []),
            exclude_patterns=args.exclude,
        )
    )


if __name__ == "__main__":
    sys.exit(main())
