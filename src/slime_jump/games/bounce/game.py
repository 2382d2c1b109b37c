from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from ...events import Action, InputEvent


@dataclass
class Ball:
    """ボールを表すデータクラス（座標・速度は画面比率）"""
    x: float
    y: float
    vx: float
    vy: float


def distance_sq(a: Ball, b: Ball) -> float:
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2


class BounceGame:
    """跳ね回るボールと、近いボール同士を結ぶ線を描くビジュアライザ"""

    width = 256
    height = 192

    BALL_COUNT = 20
    BALL_RADIUS = 2
    # 25ms 毎に速度の 1% 進む
    SPEED_PER_MS = 0.01 / 25
    RADIUS_OF_INFLUENCE = 0.4

    def __init__(self, seed: Optional[int] = None) -> None:
        self.next_game = None
        self._rng = random.Random(seed)
        self.paused = False
        self.reset()

    def reset(self) -> None:
        rnd = self._rng
        self.balls = [
            Ball(
                x=rnd.random(),
                y=rnd.random(),
                vx=rnd.random() * 2 - 1,
                vy=rnd.random() * 2 - 1,
            )
            for _ in range(self.BALL_COUNT)
        ]

    # --- 入力 ---
    def on_event(self, event: InputEvent) -> None:
        if event.action == Action.QUIT:
            from ..menu.game import MenuGame
            self.next_game = MenuGame()
            return
        if not event.pressed:
            return
        if event.action == Action.ACTION1:
            self.reset()
        elif event.action == Action.ACTION2:
            # 停止ボタン相当（もう一度押すと再開）
            self.paused = not self.paused

    # --- 更新 ---
    def update(self, elapsed_ms: float) -> None:
        if self.paused:
            return
        step = self.SPEED_PER_MS * max(0.0, elapsed_ms)
        for b in self.balls:
            b.x += b.vx * step
            b.y += b.vy * step
            # 壁で反射
            if b.x < 0:
                b.vx = abs(b.vx)
            if b.x > 1:
                b.vx = -abs(b.vx)
            if b.y < 0:
                b.vy = abs(b.vy)
            if b.y > 1:
                b.vy = -abs(b.vy)

    def links(self) -> list[tuple[Ball, Ball]]:
        """影響半径内にあるボールの組を列挙する"""
        limit = self.RADIUS_OF_INFLUENCE * self.RADIUS_OF_INFLUENCE
        pairs = []
        for i, a in enumerate(self.balls):
            for b in self.balls[i + 1:]:
                if distance_sq(a, b) <= limit:
                    pairs.append((a, b))
        return pairs

    # --- 描画 ---
    def draw(self, px) -> None:
        px.cls(7)
        w = self.width
        h = self.height
        for a, b in self.links():
            px.line(a.x * w, a.y * h, b.x * w, b.y * h, 0)
        for b in self.balls:
            px.circ(b.x * w, b.y * h, self.BALL_RADIUS, 0)
        if self.paused:
            px.text(4, 4, "PAUSED", 8)


GAME_CLASS = BounceGame
