import sys


# ANSI Escape Codes for Colors
class Color:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    END = "\033[0m"


PREFIX = "Serverless: "


def log(msg: str):
    """Plain progress line, echoed in the order the work happens."""
    print(f"{PREFIX}{msg}")


def success(msg: str):
    print(f"{Color.GREEN}✅ {msg}{Color.END}")


def warning(msg: str):
    print(f"{Color.YELLOW}⚠️ {msg}{Color.END}")


def error(msg: str):
    print(f"{Color.RED}{msg}{Color.END}", file=sys.stderr)
