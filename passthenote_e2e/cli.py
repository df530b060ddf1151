import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from . import precommit
from .config import load_settings
from .exceptions import E2EError
from .runner import SuiteRunner
from .scenarios import list_scenarios
from .server import main as serve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="passthenote-e2e",
        description="End-to-end checks for the PassTheNote login and Commerce flows"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="list catalog scenarios")

    run = subparsers.add_parser("run", help="run scenarios against the live site")
    run.add_argument("names", nargs="*", help="scenario names (default: all)")
    run.add_argument("--headed", action="store_true", help="show the browser window")
    run.add_argument("--report", type=Path, help="write the run history as JSON")

    check = subparsers.add_parser("precommit", help="run pre-commit validation")
    scope = check.add_mutually_exclusive_group()
    scope.add_argument("--staged", action="store_true", help="only staged files (default)")
    scope.add_argument("--all", action="store_true", help="all tracked files")
    check.add_argument("--skip-tests", action="store_true", help="do not run the offline test suite")
    check.add_argument("--install-hook", action="store_true", help="install the git pre-commit hook and exit")
    check.add_argument("--force", action="store_true", help="replace an existing hook")
    check.add_argument("--root", type=Path, default=Path.cwd(), help="repository root")

    subparsers.add_parser("serve", help="serve the suite as MCP tools over stdio")
    return parser


async def _run(args) -> int:
    settings = load_settings(headless=False if args.headed else None)
    runner = SuiteRunner(settings)
    await runner.initialize()
    try:
        summary = await runner.run_suite(args.names or None)
    finally:
        await runner.cleanup()

    for result in summary["results"]:
        status = "SKIP" if result.get("skipped") else ("PASS" if result["success"] else "FAIL")
        print(f"{status}  {result['scenario']}  ({result['steps_executed']}/{result['total_steps']} steps)")
        if not result["success"] and result["results"]:
            failed = result["results"][-1]
            print(f"      {failed['step']}: {failed['result'].get('error', '')}")
    print(f"{summary['passed']} passed, {summary['failed']} failed, {summary['skipped']} skipped")

    if args.report:
        runner.history.save(args.report)
    return 0 if summary["success"] else 1


def _precommit(args) -> int:
    if args.install_hook:
        hook = precommit.install_hook(args.root, force=args.force)
        print(f"Installed {hook}")
        return 0

    report = precommit.run_checks(
        args.root,
        staged_only=not args.all,
        include_tests=not args.skip_tests
    )
    for issue in report.issues:
        print(issue)
    print("pre-commit checks passed" if report.ok else f"pre-commit checks failed: {len(report.issues)} issue(s)")
    return 0 if report.ok else 1


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    try:
        if args.command == "list":
            print(json.dumps(list_scenarios(), indent=2))
            code = 0
        elif args.command == "run":
            code = asyncio.run(_run(args))
        elif args.command == "precommit":
            code = _precommit(args)
        else:
            serve()
            code = 0
    except KeyboardInterrupt:
        logging.info("Stopped by user")
        code = 130
    except E2EError as e:
        logging.error(f"Error: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
