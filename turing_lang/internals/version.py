from __future__ import annotations
import datetime
import platform
import sys

from turing_lang import __version__ as app_ver, __dev__ as is_dev


def _ensure_utf8_stdout() -> None:
    # The banner contains a bullet character
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is None:
        return
    try:
        reconfigure(encoding="utf-8")
    except ValueError:
        pass


def _get_versions() -> dict[str, str]:
    import lark

    return {
        "app": f"{app_ver} (dev)" if is_dev else app_ver,
        "python": platform.python_version(),
        "lark": getattr(lark, "__version__", "unknown"),
    }


def print_banner(stream=None) -> None:
    """Print the compiler name and the versions it runs with."""
    stream = stream or sys.stdout
    if stream is sys.stdout:
        _ensure_utf8_stdout()

    if getattr(stream, "isatty", lambda: False)():
        bold, dim, reset = "\x1b[1m", "\x1b[2m", "\x1b[0m"
    else:
        bold = dim = reset = ""

    v = _get_versions()
    today = datetime.date.today().isoformat()
    print(f"{bold}Turing machine compiler{reset} • {v['app']}", file=stream)
    print(f"{dim}Python {v['python']} • lark {v['lark']} • {today}{reset}", file=stream)
    print(file=stream)
