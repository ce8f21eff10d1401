"""
Eligibility - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the eligibility engine.

- Runs a one-off check from rule and athlete JSON files
- Serves the mock upstream API for local development

============================================================
USAGE
============================================================
python -m eligibility.cli check --rules rules.json --athlete athlete.json
python -m eligibility.cli mock-server --port 8099

Exit codes (check):
  0  eligible
  1  invalid input
  2  not eligible

============================================================
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import uvicorn

from eligibility.config import EngineConfig, MockServerConfig, setup_logging
from eligibility.engine import run_eligibility_check
from eligibility.logging_utils import EligibilityLogger
from eligibility.mock_server import create_app
from eligibility.models import AthleteData


EXIT_ELIGIBLE = 0
EXIT_INVALID_INPUT = 1
EXIT_NOT_ELIGIBLE = 2


logger = logging.getLogger("eligibility.cli")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="race-eligibility",
        description="External eligibility checks for race registrations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s check --rules rules.json --athlete athlete.json
  %(prog)s check --rules rules.json --athlete athlete.json --log-level DEBUG
  %(prog)s mock-server --port 8099 --api-key test-key-2026
        """
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # check
    # --------------------------------------------------------
    check = subparsers.add_parser("check", help="Check an athlete against a modality's rules")
    check.add_argument(
        "--rules", "-r",
        type=Path,
        required=True,
        help="JSON file with a list of rules (or an object with a 'rules' list)",
    )
    check.add_argument(
        "--athlete", "-a",
        type=Path,
        required=True,
        help="JSON file with the athlete record",
    )
    check.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: .env in the working directory)",
    )
    check.add_argument(
        "--log-level", "-l",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: ELIGIBILITY_LOG_LEVEL or INFO)",
    )
    check.add_argument(
        "--log-format",
        type=str,
        choices=["text", "json"],
        default=None,
        help="Log format (default: ELIGIBILITY_LOG_FORMAT or text)",
    )

    # --------------------------------------------------------
    # mock-server
    # --------------------------------------------------------
    mock = subparsers.add_parser("mock-server", help="Run the mock upstream API")
    mock.add_argument("--host", type=str, default=None, help="Bind address")
    mock.add_argument("--port", "-p", type=int, default=None, help="Bind port")
    mock.add_argument("--data", type=Path, default=None, help="Athletes JSON file")
    mock.add_argument("--api-key", type=str, default=None, help="Accepted API key")
    mock.add_argument("--env-file", type=str, default=None, help="Path to a .env file")

    return parser


# ============================================================
# COMMANDS
# ============================================================

def load_json_file(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_rule_list(path: Path) -> List[Any]:
    """Read rules stored either as a bare list or under a 'rules' key."""
    data = load_json_file(path)
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise ValueError("rules file must hold a list of rules")
    return data


def run_check(args: argparse.Namespace) -> int:
    """Run one eligibility check and print the result as JSON."""
    config = EngineConfig.from_env(args.env_file)
    setup_logging(
        level=args.log_level or config.log_level,
        log_format=args.log_format or config.log_format,
    )

    try:
        rules = load_rule_list(args.rules)
        athlete_data = load_json_file(args.athlete)
        if not isinstance(athlete_data, dict):
            raise ValueError("athlete file must hold a JSON object")
        athlete = AthleteData.from_dict(athlete_data)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except KeyError as e:
        print(f"Error: athlete record is missing field {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    result = run_eligibility_check(athlete, rules, config=config, log=EligibilityLogger())

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return EXIT_ELIGIBLE if result.eligible else EXIT_NOT_ELIGIBLE


def run_mock_server(args: argparse.Namespace) -> int:
    """Serve the mock upstream until interrupted."""
    config = MockServerConfig.from_env(args.env_file)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.data:
        config.data_path = args.data
    if args.api_key:
        config.api_key = args.api_key

    setup_logging()
    logger.info(f"Starting mock eligibility API on http://{config.host}:{config.port}")

    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level="info")
    return 0


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "check":
        return run_check(args)
    return run_mock_server(args)


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
