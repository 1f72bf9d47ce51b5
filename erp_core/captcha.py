"""
CAPTCHA image handling: data-URI decode, display capability check, and
the two renderers.

  inline → Pillow + rich half-block cells, straight into the terminal
  file   → captcha.png in the working dir, opened with the OS viewer

Which one runs is decided up front by supports_inline_images(); the file
renderer is always the fallback and never blocks the login.
"""

import base64
import io
import os
import re
import subprocess
import sys
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from rich.markup import escape
from rich.color import Color
from rich.style import Style
from rich.text import Text

from .config import log
from .constants import CAPTCHA_FILENAME, CAPTCHA_INLINE_WIDTH

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)
_HALF_BLOCK = "\u2580"   # upper half block: fg = top pixel, bg = bottom pixel


# ─── Decoding ────────────────────────────────────────────────────

def decode_data_uri(data_uri):
    """Return raw image bytes from 'data:image/png;base64,...' (prefix optional)."""
    if not data_uri or not isinstance(data_uri, str):
        raise ValueError("empty image data")
    payload = _DATA_URI_PREFIX.sub("", data_uri.strip(), count=1)
    raw = base64.b64decode(payload)
    if not raw:
        raise ValueError("empty image data")
    return raw


def captcha_path(directory=None):
    return Path(directory or os.getcwd()) / CAPTCHA_FILENAME


def write_captcha(image, path):
    path = Path(path)
    path.write_bytes(image)
    return path


# ─── Capability check ────────────────────────────────────────────

def supports_inline_images(platform, is_terminal, color_system):
    """Can this environment draw the CAPTCHA inline? Pure function of its inputs."""
    if platform == "win32":
        return False
    return bool(is_terminal) and color_system in ("256", "truecolor")


def console_supports_inline(console):
    return supports_inline_images(sys.platform, console.is_terminal, console.color_system)


# ─── Renderers ───────────────────────────────────────────────────

def image_to_text(image, max_width=CAPTCHA_INLINE_WIDTH):
    """Convert image bytes to a rich Text of half-block cells. Raises on bad image."""
    with Image.open(io.BytesIO(image)) as img:
        img = img.convert("RGB")
        width = max(1, min(max_width, img.width))
        height = max(2, round(img.height * width / img.width))
        height += height % 2
        img = img.resize((width, height))
        pixels = img.load()

        text = Text()
        for y in range(0, height, 2):
            for x in range(width):
                top, bottom = pixels[x, y], pixels[x, y + 1]
                text.append(_HALF_BLOCK, Style(
                    color=Color.from_rgb(*top),
                    bgcolor=Color.from_rgb(*bottom),
                ))
            text.append("\n")
        return text


def open_with_default_viewer(path, platform=None):
    """Hand the file to the OS image viewer. Returns False if that failed."""
    platform = platform or sys.platform
    try:
        if platform == "win32":
            os.startfile(str(path))
        elif platform == "darwin":
            subprocess.Popen(["open", str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        else:
            subprocess.Popen(["xdg-open", str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        return True
    except OSError as e:
        log.warning("Could not open %s: %s", path, e)
        return False


def render_inline(console, image, path, title="CAPTCHA"):
    """Draw the image in the terminal. Returns False if Pillow can't read it."""
    try:
        art = image_to_text(image, max_width=min(CAPTCHA_INLINE_WIDTH, console.width - 2))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        log.warning("Inline CAPTCHA render failed: %s", e)
        return False
    console.print(f"\n[info]--- {title} (enter the characters you see below) ---[/]\n")
    console.print(art, end="")
    console.print("\n[info]--- Enter the CAPTCHA above ---[/]\n")
    return True


def render_to_file(console, image, path, title="CAPTCHA", platform=None):
    """Point the user at captcha.png and try to open it. Always returns True."""
    platform = platform or sys.platform
    console.print(f"\n[info]--- {title} (enter the characters you see in the image) ---[/]\n")
    console.print(f"[warn]CAPTCHA saved to: {escape(str(path))}[/]")
    if platform == "win32":
        console.print(f"[warn]Open it with: start {Path(path).name}[/]")
    if not open_with_default_viewer(path, platform=platform):
        console.print(f"[warn]Could not auto-open the image. Please open {Path(path).name} manually.[/]")
    console.print("\n[info]--- Enter the CAPTCHA above ---[/]\n")
    return True


def select_renderer(inline_ok):
    return render_inline if inline_ok else render_to_file


def show_captcha(console, challenge, inline_ok, path=None, title="CAPTCHA"):
    """
    Write the CAPTCHA to disk and display it with the best available renderer.
    Returns True if it was drawn inline, False if the file fallback was used.
    """
    target = path or captcha_path()
    try:
        path = write_captcha(challenge.image, target)
    except OSError as e:
        # Only the file fallback needs the image on disk.
        if not inline_ok:
            raise
        log.warning("Could not save CAPTCHA image to %s: %s", target, e)
        path = None
    renderer = select_renderer(inline_ok)
    if renderer is render_inline and render_inline(console, challenge.image, path, title=title):
        return True
    if path is None:
        path = write_captcha(challenge.image, target)
    render_to_file(console, challenge.image, path, title=title)
    return False
