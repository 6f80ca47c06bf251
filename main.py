# main.py
"""Run the Press API with uvicorn. Extra arguments are passed through."""

from subprocess import run
from sys import argv, executable

DEFAULT_ARGS = [
    "--host",
    "127.0.0.1",
    "--port",
    "8000",
    "--log-level",
    "info",
    "--loop",
    "uvloop",
    "--http",
    "httptools",
    "--proxy-headers",
]


def main(extra: list[str] | None = None) -> None:
    cmmd = [executable, "-m", "uvicorn", "press.main:app", *DEFAULT_ARGS, *(extra or [])]
    run(cmmd, check=True)


if __name__ == "__main__":
    main(argv[1:])
