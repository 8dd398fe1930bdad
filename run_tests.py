#!/usr/bin/env python3
"""
Test runner script for the FRA Atlas project.

This script provides options for running the test suite:
- All tests
- Specific test categories (boundaries, claims, core, cli)
- Coverage reporting
"""

import sys
import subprocess
import argparse


TEST_GROUPS = {
    'boundaries': [
        'tests/test_fetcher.py', 'tests/test_cache.py', 'tests/test_transitions.py',
        'tests/test_layers.py', 'tests/test_lookup.py', 'tests/test_manager.py'
    ],
    'claims': ['tests/test_claims.py', 'tests/test_search.py'],
    'core': ['tests/test_config.py', 'tests/test_data_utils.py', 'tests/test_viewport.py'],
    'cli': ['tests/test_main.py', 'tests/test_atlas.py'],
}


def run_command(cmd, description=""):
    """Run a command and return whether it succeeded."""
    print(f"\n{'='*60}")
    if description:
        print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}")

    try:
        result = subprocess.run(cmd, check=False)
        print(f"\nExit code: {result.returncode}")
        return result.returncode == 0
    except OSError as e:
        print(f"Error running command: {e}")
        return False


def run_all_tests():
    cmd = [sys.executable, "-m", "pytest", "-v", "--tb=short"]
    return run_command(cmd, "All Tests")


def run_group(group):
    cmd = [sys.executable, "-m", "pytest", "-v", "--tb=short", *TEST_GROUPS[group]]
    return run_command(cmd, f"{group.capitalize()} Tests")


def run_coverage_tests():
    """Run tests with coverage reporting."""
    cmd = [
        sys.executable, "-m", "pytest", "--cov=fra_atlas", "--cov-report=html",
        "--cov-report=term-missing", "-v"
    ]
    success = run_command(cmd, "Coverage Tests")
    if success:
        print("\nCoverage report generated in htmlcov/index.html")
    return success


def run_specific_test(test_file):
    cmd = [sys.executable, "-m", "pytest", "-v", test_file]
    return run_command(cmd, f"Specific Test: {test_file}")


def check_test_environment():
    """Check if the test environment is properly set up."""
    print("Checking test environment...")
    print(f"Python version: {sys.version}")

    required_packages = ['pandas', 'numpy', 'rapidfuzz', 'requests', 'folium', 'tqdm', 'psutil', 'pytest']
    missing_packages = []

    for package in required_packages:
        try:
            __import__(package)
            print(f"[ok] {package} is available")
        except ImportError:
            print(f"[missing] {package}")
            missing_packages.append(package)

    try:
        __import__('pytest_cov')
        print("[ok] pytest_cov is available (optional)")
    except ImportError:
        print("[-] pytest_cov is not available (optional)")

    if missing_packages:
        print(f"\nMissing required packages: {', '.join(missing_packages)}")
        print("Please install them using: pip install -r requirements.txt")
        return False

    print("\nTest environment is ready")
    return True


def main():
    """Main test runner function."""
    parser = argparse.ArgumentParser(description="FRA Atlas Test Runner")
    parser.add_argument("--type", choices=["all", "coverage", *TEST_GROUPS],
                        default="all", help="Type of tests to run")
    parser.add_argument("--file", help="Run specific test file")
    parser.add_argument("--check-env", action="store_true", help="Check test environment")

    args = parser.parse_args()

    if args.check_env:
        return 0 if check_test_environment() else 1

    if not check_test_environment():
        print("\nTest environment check failed. Please fix the issues above.")
        return 1

    if args.file:
        success = run_specific_test(args.file)
    elif args.type == "coverage":
        success = run_coverage_tests()
    elif args.type in TEST_GROUPS:
        success = run_group(args.type)
    else:
        success = run_all_tests()

    if success:
        print("\nAll tests completed successfully!")
        return 0

    print("\nSome tests failed. Please check the output above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
