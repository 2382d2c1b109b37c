from __future__ import annotations

import random
import sys
import traceback
from dataclasses import dataclass
from typing import List, Optional

from ...events import Action, InputEvent
from ...registry import discover_games

TITLE = "SLIME JUMP"
HELP = "SPACE: next  ENTER: start  ESC: quit"
LIST_TOP = 48
ROW_HEIGHT = 12
STAR_COUNT = 60


@dataclass
class MenuItem:
    name: str
    cls: type
    source: str


@dataclass
class Star:
    x: float
    y: int
    speed: float  # px/ms


class MenuGame:
    """
    起動できるゲームの一覧。

    Space かクリックでカーソルを進め、Enter で選んだゲームを作って
    ``next_game`` に置く。Esc は App 側が拾って終了する。
    """

    width = 256
    height = 192

    def __init__(self) -> None:
        self.items: List[MenuItem] = sorted(
            (MenuItem(name, info.cls, info.source) for name, info in discover_games().items() if name != "menu"),
            key=lambda item: item.name,
        )
        self.idx = 0
        self.blink_ms = 0.0
        self.next_game: Optional[object] = None

        rnd = random.Random(42)
        self.stars = [
            Star(rnd.randrange(0, self.width), rnd.randrange(0, self.height // 2), (0.1 + rnd.random() * 0.5) * 0.06)
            for _ in range(STAR_COUNT)
        ]

    @property
    def selected(self) -> Optional[MenuItem]:
        return self.items[self.idx] if self.items else None

    def on_event(self, e: InputEvent) -> None:
        # 離した時のイベントは無視（押しっぱなしで連続移動しない）
        if not self.items or not e.pressed:
            return
        if e.action == Action.ACTION1:
            self.idx = (self.idx + 1) % len(self.items)
        elif e.action == Action.ACTION2:
            self._launch(self.items[self.idx])

    def _launch(self, item: MenuItem) -> None:
        try:
            self.next_game = item.cls()
        except Exception:
            # 作れなかったゲームはメニューに留まる
            traceback.print_exc(file=sys.stderr)
            self.next_game = None

    def update(self, elapsed_ms: float) -> None:
        self.blink_ms = (self.blink_ms + elapsed_ms) % 1000.0
        for star in self.stars:
            star.x -= star.speed * elapsed_ms
            if star.x < -2:
                star.x = self.width + 2

    def draw(self, px) -> None:
        self._draw_sky(px)
        self._draw_title(px)
        if not self.items:
            px.text(20, 60, "No games found.", 8)
            return
        self._draw_items(px)

    def _draw_sky(self, px) -> None:
        horizon = self.height // 2
        px.rect(0, 0, self.width, horizon, 1)
        px.rect(0, horizon, self.width, self.height - horizon, 5)
        star_color = 7 if self.blink_ms < 500 else 6
        for star in self.stars:
            px.pset(int(star.x), star.y, star_color)

    def _draw_title(self, px) -> None:
        tx = self.width // 2 - len(TITLE) * 2
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            px.text(tx + dx, 12 + dy, TITLE, 0)
        px.text(tx, 12, TITLE, 11)
        px.text(self.width // 2 - len(HELP) * 2, 26, HELP, 6)

    def _draw_items(self, px) -> None:
        for i, item in enumerate(self.items):
            y = LIST_TOP + i * ROW_HEIGHT
            px.text(36, y, item.name, 11 if i == self.idx else 7)
            px.text(self.width - 110, y, f"({item.source})", 5)
        y = LIST_TOP + self.idx * ROW_HEIGHT - 2
        px.rectb(28, y - 2, self.width - 56, ROW_HEIGHT, 10)


GAME_CLASS = MenuGame
