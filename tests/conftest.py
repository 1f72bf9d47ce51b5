"""
Shared fixtures: a recording console, a tiny PNG, scripted prompts.
"""

import base64
import io

import pytest
from PIL import Image

from erp_core.palette import make_console


def make_png(width=12, height=6, color="white"):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, "PNG")
    return buf.getvalue()


def data_uri(png):
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def scripted_ask(*answers):
    """Prompt stand-in that returns the given answers in order and records labels."""
    remaining = list(answers)
    labels = []

    def ask(label, **kwargs):
        labels.append(label)
        if not remaining:
            raise AssertionError(f"Unexpected prompt: {label}")
        return remaining.pop(0)

    ask.labels = labels
    ask.remaining = remaining
    return ask


@pytest.fixture
def console():
    return make_console(no_color=True, file=io.StringIO(), width=200)


@pytest.fixture
def png():
    return make_png()


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / "state" / "session.json"


@pytest.fixture(autouse=True)
def _no_image_viewer(monkeypatch):
    """Never launch a real image viewer from tests."""
    opened = []

    def fake_open(path, platform=None):
        opened.append(path)
        return True

    monkeypatch.setattr("erp_core.captcha.open_with_default_viewer", fake_open)
    return opened
