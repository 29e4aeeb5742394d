"""Output formatting, TTY prompts, and colors."""

import getpass
import sys

# ANSI color codes, disabled when stdout is not a TTY
_USE_COLOR = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

RED = "\033[0;31m" if _USE_COLOR else ""
GREEN = "\033[0;32m" if _USE_COLOR else ""
YELLOW = "\033[1;33m" if _USE_COLOR else ""
BLUE = "\033[0;34m" if _USE_COLOR else ""
NC = "\033[0m" if _USE_COLOR else ""


def print_banner(msg: str) -> None:
    print(f"{GREEN}")
    print("=" * 34)
    print(f"  {msg}")
    print("=" * 34)
    print(f"{NC}")


def print_info(msg: str) -> None:
    print(f"{GREEN}[INFO]{NC} {msg}")


def print_warning(msg: str) -> None:
    print(f"{YELLOW}[WARN]{NC} {msg}")


def print_error(msg: str) -> None:
    print(f"{RED}[ERROR]{NC} {msg}", file=sys.stderr)


def print_step(msg: str) -> None:
    print(f"{BLUE}[STEP]{NC} {msg}")


def print_section(msg: str) -> None:
    print(f"\n{BLUE}{msg}{NC}")


def print_done(msg: str) -> None:
    print(f"\n{GREEN}{msg}{NC}")


def print_menu(title: str, options: list[str]) -> None:
    """Numbered menu on stderr, next to the prompt that follows it."""
    print(f"\n{BLUE}{title}{NC}", file=sys.stderr)
    for i, option in enumerate(options, 1):
        print(f"{i}. {option}", file=sys.stderr)


# ---------------------------------------------------------------------------
# TTY input helpers: read from /dev/tty so prompts work when stdin is piped
# (curl | sudo python3 -m ...). Falls back to sys.stdin if /dev/tty is
# unavailable.
# ---------------------------------------------------------------------------

def _tty_input(prompt_text: str) -> str:
    """Read a line from /dev/tty (or stdin as fallback)."""
    try:
        tty = open("/dev/tty", "r")
    except OSError:
        tty = sys.stdin

    try:
        sys.stderr.write(prompt_text)
        sys.stderr.flush()
        line = tty.readline()
        if not line:
            raise EOFError("no input available for prompt")
        return line.rstrip("\n")
    finally:
        if tty is not sys.stdin:
            tty.close()


def prompt_yes_no(prompt: str, default: str = "n") -> bool:
    """Prompt for y/n confirmation. Returns True for yes."""
    suffix = " (Y/n): " if default == "y" else " (y/N): "
    response = _tty_input(prompt + suffix).strip()
    if not response:
        response = default
    return response.lower() in ("y", "yes")


def prompt_input(prompt: str, default: str = "") -> str:
    """Prompt for a text value with optional default."""
    if default:
        text = f"{prompt} [{default}]: "
    else:
        text = f"{prompt}: "
    response = _tty_input(text).strip()
    return response if response else default


def prompt_secret(prompt: str) -> str:
    """Prompt for a value without echo. getpass reads /dev/tty itself."""
    return getpass.getpass(f"{prompt}: ", stream=sys.stderr)
