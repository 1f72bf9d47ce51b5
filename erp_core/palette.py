"""
Color palette as a rich Theme, and the shared Console factory.

Styles are referenced by name ("[success]...[/]") everywhere else, so
turning color off is one switch here.
"""

from rich.console import Console
from rich.theme import Theme

from .constants import PALETTE, DEFAULT_TARGET_PERCENT, WARN_PERCENT

THEME = Theme(PALETTE)


def make_console(no_color=False, **kwargs):
    return Console(theme=THEME, no_color=no_color, highlight=False, **kwargs)


def percent_style(pct):
    """success at/above the target, warn at/above WARN_PERCENT, else error."""
    if pct is None:
        return "muted"
    if pct >= DEFAULT_TARGET_PERCENT:
        return "success"
    if pct >= WARN_PERCENT:
        return "warn"
    return "error"
