"""
Banner, help screen and goodbye text.
"""

from rich.align import Align
from rich.console import Group
from rich.text import Text

from .constants import ERP_VERSION, MENU_OPTIONS

_BANNER = r"""
    _    ___ _____ __  __   _____ ____  ____
   / \  |_ _|_   _|  \/  | | ____|  _ \|  _ \
  / _ \  | |  | | | |\/| | |  _| | |_) | |_) |
 / ___ \ | |  | | | |  | | | |___|  _ <|  __/
/_/   \_\___| |_| |_|  |_| |_____|_| \_\_|
"""

# Banner lines fade from dim to bright accent, top to bottom.
_BANNER_STYLES = ["accent.dim", "accent.dim", "accent", "accent", "accent.bright"]

TAGLINE = "Student ERP CLI - Track attendance, marks, subjects"


def render_banner():
    lines = _BANNER.strip("\n").split("\n")
    width = max(len(line) for line in lines)
    text = Text()
    for i, line in enumerate(lines):
        style = _BANNER_STYLES[min(i, len(_BANNER_STYLES) - 1)]
        text.append(line.ljust(width) + "\n", style=style)
    return Group(
        Align.center(text),
        Align.center(Text(TAGLINE, style="info")),
    )


def render_help_header(version=ERP_VERSION):
    return Group(
        Text(f"AITM ERP {version} (Axis Colleges)", style="accent.bright"),
        Text("Track attendance, marks, and subjects from the terminal.", style="muted"),
    )


def render_help():
    parts = [render_help_header(), render_banner(), Text("\nMenu options ---\n", style="accent")]
    for _key, name, desc in MENU_OPTIONS:
        line = Text("  - ")
        line.append(name.ljust(20), style="accent.bright")
        line.append(desc)
        parts.append(line)

    parts.append(Text("\nUsage ---\n", style="accent"))
    parts.append(Text("  Run: aitm-erp"))
    parts.append(Text("  Pick a menu number, Enter to confirm\n"))
    parts.append(Text("Flags: --no-color, -V or --version, --help", style="muted"))
    parts.append(Text("Env: NO_COLOR=1, AITM_ERP_BASE_URL, AITM_ERP_HOME, AITM_ERP_DEBUG=1\n", style="muted"))
    return Group(*parts)


def render_goodbye():
    return Align.center(Text("Goodbye!", style="accent.bright"))
