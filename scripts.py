import subprocess
import sys

TARGETS = ["src", "tests", "scripts"]


def _run(*args: str) -> int:
    return subprocess.run(["uv", "run", *args]).returncode


def format_code():
    return _run("ruff", "format", *TARGETS)


def lint():
    return _run("ruff", "check", *TARGETS)


def lint_fix():
    return _run("ruff", "check", "--fix", *TARGETS)


def test():
    return _run("pytest", "-q")


def check():
    return lint() or _run("ruff", "format", "--check", *TARGETS) or test()


COMMANDS = {
    "format": format_code,
    "lint": lint,
    "fix": lint_fix,
    "test": test,
    "check": check,
}


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(f"Usage: python scripts.py [{'|'.join(COMMANDS)}]")
        sys.exit(1)

    command = COMMANDS.get(sys.argv[1])
    if command is None:
        print(f"Unknown command: {sys.argv[1]}")
        sys.exit(1)
    sys.exit(command())
