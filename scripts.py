#!/usr/bin/env python3
"""
Development scripts for the graphboot project.

Usage: python scripts.py <command>
"""

import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

Check = tuple[list[str], str]


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return True if successful."""
    print(f"\n🔄 {description}: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed with exit code {e.returncode}")
        return False
    except FileNotFoundError:
        print(f"❌ Command not found: {cmd[0]}")
        return False
    print(f"✅ {description} passed")
    return True


def run_checks(checks: list[Check]) -> int:
    # Every check runs, even after a failure
    results = [run_command(cmd, description) for cmd, description in checks]
    return 0 if all(results) else 1


def run_tests() -> int:
    return run_checks([(["uv", "run", "pytest", "-v"], "Tests")])


def run_lint() -> int:
    status = run_checks(
        [
            (["uv", "run", "ruff", "check", "."], "Ruff linting"),
            (["uv", "run", "ruff", "format", "--check", "."], "Ruff formatting"),
        ]
    )
    if status:
        print("\n💡 To fix formatting and some lint issues: uv run ruff format . && uv run ruff check --fix .")
    return status


def run_typecheck() -> int:
    return run_checks(
        [
            (["uv", "run", "mypy", "src/graphboot/"], "MyPy type checking"),
            (["uv", "run", "pyright", "src/graphboot/"], "Pyright type checking"),
        ]
    )


def run_demos() -> int:
    """Run every demo script; deprecation warnings are errors there."""
    demos = sorted(path for path in Path("demo").glob("*.py") if not path.name.startswith("_"))
    if not demos:
        print("⚠️  No demo scripts found")
        return 0
    return run_checks(
        [(["uv", "run", "python", "-W", "error::DeprecationWarning", str(demo)], f"Demo {demo.name}") for demo in demos]
    )


COMMANDS: dict[str, Callable[[], int]] = {
    "test": run_tests,
    "lint": run_lint,
    "typecheck": run_typecheck,
    "demos": run_demos,
}


def check_all() -> int:
    """Run tests, linting, type checking and demos, then print a summary."""
    results = {name: func() == 0 for name, func in COMMANDS.items()}

    print(f"\n{'=' * 20} SUMMARY {'=' * 20}")
    for name, passed in results.items():
        print(f"{name:<15} {'✅ PASS' if passed else '❌ FAIL'}")
    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    commands = {**COMMANDS, "check": check_all}
    if len(sys.argv) != 2 or sys.argv[1] not in commands:
        print(f"Available commands: {', '.join(commands)}")
        print("Usage: python scripts.py <command>")
        sys.exit(1)
    sys.exit(commands[sys.argv[1]]())
