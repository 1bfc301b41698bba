#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
chronokit Test Runner

Central test orchestrator for the chronokit test suites.
Organized into logical test categories with specific sub-commands.

⚠️  NOTE: This is NOT a pytest module!
    This is a standalone test orchestrator that runs pytest suites.
    Run it directly: python test_runner.py [category] [action]
    Do NOT run with pytest.

Test Categories:
  - utils:   Date utilities (clock, zones, formats, arithmetic, caches, logging)
  - schemas: Date value schemas (TimeEvent, MutableDate)
  - cli:     Command-line front end (dates_cli.py)
"""

import argparse
import subprocess
import sys
import traceback
from pathlib import Path

import argcomplete

from chronokit.test_scripts.test_utils import (
    Colors,
    print_error,
    print_header,
    print_info,
    print_results,
    print_section,
    print_success,
    print_warning,
    )

TEST_ROOT = "chronokit/test_scripts"

# Suites per category: action name -> (description, test file)
UTILS_SUITES = {
    "clock": ("Clock", "test_utilities/test_clock.py"),
    "timezone": ("Time zones", "test_utilities/test_timezone_utils.py"),
    "formats": ("Date formats", "test_utilities/test_date_formats.py"),
    "datetime": ("Datetime utils", "test_utilities/test_datetime_utils.py"),
    "duration": ("Duration utils", "test_utilities/test_duration_utils.py"),
    "cache": ("Cache utils", "test_utilities/test_cache_utils.py"),
    "locale": ("Locale utils", "test_utilities/test_locale_utils.py"),
    "config": ("Configuration", "test_utilities/test_config.py"),
    "logging": ("Logging configuration", "test_utilities/test_logging_config.py"),
    }
SCHEMAS_SUITES = {
    "dates": ("Date schemas", "test_schemas/test_date_schemas.py"),
    }
CLI_SUITES = {
    "dates": ("Date CLI", "test_cli/test_dates_cli.py"),
    }

CATEGORIES = {
    "utils": ("Utility Tests", UTILS_SUITES),
    "schemas": ("Schema Tests", SCHEMAS_SUITES),
    "cli": ("CLI Tests", CLI_SUITES),
    }

# Global flag for coverage mode (set by main())
_COVERAGE_MODE = False


def _build_pytest_cmd(test_path: str, test_names: list = None) -> list:
    """
    Build pytest command with optional test name filter.

    Args:
        test_path: Path to test file or directory, relative to TEST_ROOT
        test_names: Optional list of test names to filter (uses -k flag)

    Returns:
        List of command parts for run_command
    """
    cmd = [sys.executable, "-m", "pytest", f"{TEST_ROOT}/{test_path}", "-v"]
    if test_names:
        cmd.extend(["-k", " or ".join(test_names)])
    return cmd


def run_command(cmd: list[str], description: str, verbose: bool = False) -> bool:
    """
    Run a pytest command and return True if successful.

    If _COVERAGE_MODE is True, coverage flags are added and results are
    appended to the cumulative .coverage database.

    Args:
        cmd: Command to run as list
        description: Description for logging
        verbose: If True, show full pytest output

    Returns:
        bool: True if command succeeded
    """
    flags_to_add = []
    if verbose:
        flags_to_add.append("-s")
    if _COVERAGE_MODE:
        flags_to_add.extend([
            "--cov=chronokit/core",
            "--cov=dates_cli",
            "--cov-append",
            "--cov-report=html",
            "--cov-report=term-missing:skip-covered",
            ])
        print(f"{Colors.YELLOW}📊 Coverage tracking enabled (appending to .coverage){Colors.NC}")
    pytest_idx = cmd.index("pytest")
    cmd = cmd[:pytest_idx + 1] + flags_to_add + cmd[pytest_idx + 1:]

    print(f"\n{Colors.BLUE}Running: {description}{Colors.NC}")
    print(f"Command:\n└─▶ $ {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, cwd=Path(__file__).parent, capture_output=not verbose, text=True)
    except OSError as e:
        print_error(f"{description} - ERROR: {e}")
        return False

    if result.returncode == 0:
        print_success(f"{description} - PASSED")
        return True

    print_error(f"{description} - FAILED (exit code: {result.returncode})")
    if not verbose and result.stdout:
        # Show the pytest summary so failures are visible without -v
        print("\n".join(result.stdout.splitlines()[-25:]))
    return False


def run_suite(category: str, action: str, verbose: bool = False, test_names: list = None) -> bool:
    """Run one suite of a category."""
    title, suites = CATEGORIES[category]
    description, test_path = suites[action]
    print_section(f"{title.split()[0]}: {description}")
    print_info(f"Testing: {TEST_ROOT}/{test_path}")
    return run_command(_build_pytest_cmd(test_path, test_names), f"{description} tests", verbose=verbose)


def run_category(category: str, verbose: bool = False) -> bool:
    """Run every suite of a category, stopping at the first failure."""
    title, suites = CATEGORIES[category]
    print_header(f"chronokit {title}")

    results = []
    for action, (description, _) in suites.items():
        success = run_suite(category, action, verbose=verbose)
        results.append((description, success))

        if not success:
            print_error(f"Test failed: {description}")
            print_warning(f"Stopping {category} tests execution")
            break

    return print_results(results, title)


def run_all_tests(verbose: bool = False) -> bool:
    """
    Run ALL tests in order: utils, schemas, cli.
    """
    print_header("chronokit Complete Test Suite")
    print_info("Running all test categories in order\n")

    results = []
    for category, (title, _) in CATEGORIES.items():
        print(f"\n{'=' * 70}")
        print(f"Starting: {title}")
        print('=' * 70)

        success = run_category(category, verbose=verbose)
        results.append((title, success))

        if not success:
            print_error(f"\nCategory failed: {title}")
            print_warning("Stopping complete test suite execution")
            break

    return print_results(results, "Complete Test Suite")


# ============================================================================
# MAIN ARGUMENT PARSER
# ============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="chronokit Test Runner - Organized test execution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Test Categories:

  utils    - Utility Module Tests
             Clock, time zones, date formats, datetime and duration
             arithmetic, caches, locale, configuration, logging.

  schemas  - Schema Tests
             TimeEvent enumeration and MutableDate slots.

  cli      - CLI Tests
             dates_cli.py commands and exit codes.

  all      - Run ALL tests

Examples:
  python test_runner.py all                       # All tests
  python test_runner.py -v utils formats          # One suite with full output
  python test_runner.py utils datetime -k month   # Filter tests by name
  python test_runner.py --coverage --cov-clean all
        """
        )

    # Global flags
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show full test output",
        default=False
        )

    parser.add_argument(
        "--coverage",
        action="store_true",
        help="Run tests with code coverage tracking (generates htmlcov/index.html report)",
        default=False
        )

    parser.add_argument(
        "--cov-clean",
        action="store_true",
        help="Clean coverage database before running tests (use with --coverage)",
        default=False
        )

    subparsers = parser.add_subparsers(
        dest="category",
        help="Test category to run",
        required=False
        )

    for category, (title, suites) in CATEGORIES.items():
        category_parser = subparsers.add_parser(category, help=title)
        category_parser.add_argument(
            "action",
            choices=[*suites, "all"],
            help="Suite to run (or 'all')"
            )
        category_parser.add_argument(
            "-k", "--test-names",
            nargs="+",
            dest="test_names",
            help="Only run tests whose names match (pytest -k)"
            )

    subparsers.add_parser("all", help="Run ALL tests")

    return parser


def main():
    """Main entry point."""
    global _COVERAGE_MODE

    parser = create_parser()

    argcomplete.autocomplete(parser)
    args = parser.parse_args()

    # If no category provided, show help
    if not args.category:
        parser.print_help()
        return 1

    verbose = args.verbose
    test_names = getattr(args, "test_names", None)
    _COVERAGE_MODE = args.coverage

    if _COVERAGE_MODE:
        print_header("chronokit Test Suite - Coverage Mode")
        print(f"{Colors.BLUE}Final report: htmlcov/index.html{Colors.NC}\n")

        if args.cov_clean:
            print(f"{Colors.YELLOW}🗑️  Resetting coverage database...{Colors.NC}")
            result = subprocess.run(
                [sys.executable, "-m", "coverage", "erase"],
                cwd=Path(__file__).parent,
                capture_output=True,
                text=True
                )
            if result.returncode == 0:
                print(f"{Colors.GREEN}✅ Coverage database reset{Colors.NC}\n")
            else:
                print(f"{Colors.RED}❌ Failed to reset coverage database{Colors.NC}")
                print(f"{Colors.RED}   Error: {result.stderr}{Colors.NC}\n")

    if args.category == "all":
        success = run_all_tests(verbose=verbose)
    elif args.action == "all":
        success = run_category(args.category, verbose=verbose)
    else:
        success = run_suite(args.category, args.action, verbose=verbose, test_names=test_names)

    if _COVERAGE_MODE:
        print()
        print_header("Coverage Report Summary")
        if not success:
            print_warning("Some tests failed, but coverage was still tracked")
        subprocess.run(
            [sys.executable, "-m", "coverage", "report", "--skip-covered"],
            cwd=Path(__file__).parent,
            text=True
            )
        print(f"\n{Colors.GREEN}📊 HTML report: {Colors.BLUE}htmlcov/index.html{Colors.NC}\n")

    # Exit with appropriate code
    return 0 if success else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print(f"\n\n{Colors.YELLOW}⚠️  Test execution interrupted by user{Colors.NC}")
        sys.exit(130)
    except Exception as e:
        print(f"\n{Colors.RED}❌ Unexpected error: {e}{Colors.NC}")

        traceback.print_exc()
        sys.exit(1)
