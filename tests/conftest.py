"""Shared fakes for the Pyxel drawing surface."""
from pathlib import Path

import pytest


class FakeImage:
    def __init__(self):
        self.calls = []

    def set(self, x, y, data):
        self.calls.append(("set", x, y, list(data)))

    def load(self, x, y, filename):
        self.calls.append(("load", x, y, filename))


class FakeSound:
    def __init__(self):
        self.settings = None

    def set(self, **kwargs):
        self.settings = kwargs


class FakePyxel:
    """Records every call made against it, like a tiny Pyxel."""

    KEY_SPACE = 32
    KEY_RETURN = 13
    KEY_ESCAPE = 27
    MOUSE_BUTTON_LEFT = 1

    def __init__(self):
        self.calls = []
        self.images = [FakeImage() for _ in range(3)]
        self.sounds = [FakeSound() for _ in range(4)]
        self.held = set()
        self.just_pressed = set()
        self.run_called = False
        self.quit_called = False
        self.update = None
        self.draw = None

    # lifecycle
    def init(self, width, height, title=None, display_scale=None):
        self.calls.append(("init", width, height, title))

    def mouse(self, visible):
        self.calls.append(("mouse", visible))

    def run(self, update, draw):
        self.run_called = True
        self.update = update
        self.draw = draw

    def quit(self):
        self.quit_called = True

    # input
    def btn(self, key):
        return key in self.held

    def btnp(self, key):
        return key in self.just_pressed

    # drawing
    def cls(self, col):
        self.calls.append(("cls", col))

    def rect(self, x, y, w, h, col):
        self.calls.append(("rect", x, y, w, h, col))

    def rectb(self, x, y, w, h, col):
        self.calls.append(("rectb", x, y, w, h, col))

    def circ(self, x, y, r, col):
        self.calls.append(("circ", x, y, r, col))

    def line(self, x1, y1, x2, y2, col):
        self.calls.append(("line", x1, y1, x2, y2, col))

    def pset(self, x, y, col):
        self.calls.append(("pset", x, y, col))

    def text(self, x, y, s, col):
        self.calls.append(("text", x, y, s, col))

    def blt(self, x, y, img, u, v, w, h, colkey=None):
        self.calls.append(("blt", x, y, img, u, v, w, h, colkey))

    def dither(self, alpha):
        self.calls.append(("dither", alpha))

    def play(self, ch, snd):
        self.calls.append(("play", ch, snd))

    def names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def px():
    return FakePyxel()


@pytest.fixture
def sprite_sheet(tmp_path) -> Path:
    """A valid 96x26 hex-row sprite sheet."""
    path = tmp_path / "sheet.txt"
    path.write_text("\n".join(["0b" * 48] * 26) + "\n", encoding="utf-8")
    return path
