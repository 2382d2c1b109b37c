from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

from .machine import clamp, jump_distance, jump_offset_x, jump_offset_y
from .state import CONFIG, GameState, Level, Phase, SlimeConfig

# パレット番号（Pyxel の 16 色）
COLOR_BACKGROUND = 7
COLOR_PLATFORM = 4
COLOR_PLATFORM_EDGE = 2
COLOR_ARC = 13
COLOR_SWEAT = 8
COLOR_SCORE = 3
COLOR_DEBUG = 8
COLOR_KEY = 0  # スプライトの透過色

FONT_HEIGHT = 7
BEZIER_SEGMENTS = 16


class Frame(Enum):
    # スプライトシート上のコマ（左から順に並ぶ）
    IDLE = 0
    BLINK = 1
    STRAINED = 2


# --- 描画プリミティブ ----------------------------------------------------------


@dataclass(frozen=True)
class Clear:
    color: int


@dataclass(frozen=True)
class FillCircle:
    x: float
    y: float
    r: float
    color: int
    alpha: float = 1.0


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    w: float
    h: float
    color: int


@dataclass(frozen=True)
class Blit:
    # 描画先は左下を基準とした矩形、描画元はスプライトシート上の矩形
    x: float
    y: float
    w: float
    h: float
    u: int
    v: int
    src_w: int
    src_h: int


@dataclass(frozen=True)
class Bezier:
    points: tuple[tuple[float, float], ...]
    color: int


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    color: int


DrawCall = Union[Clear, FillCircle, FillRect, Blit, Bezier, Text]


# --- 状態 -> プリミティブ ------------------------------------------------------


def is_blinking(animation_time_ms: float, config: SlimeConfig = CONFIG) -> bool:
    """待機中のまばたき判定。

    5 秒周期のうち奇数番目の周期だけ、周期の頭と 0.5 秒後に
    ``blink_ms`` だけ目を閉じる。
    """
    t = animation_time_ms / 1000.0
    cycle = config.blink_cycle_s
    window = config.blink_ms / 1000.0
    if t <= cycle or math.floor(t / cycle) % 2 != 1:
        return False
    phase = t - math.floor(t / cycle) * cycle
    second = config.blink_second_offset_s
    return phase <= window or second <= phase <= second + window


def render(
    state: GameState,
    width: int,
    height: int,
    config: SlimeConfig = CONFIG,
    debug: bool = False,
) -> list[DrawCall]:
    """ゲーム状態から描画命令の列を作る（状態は読むだけで変更しない）"""
    calls: list[DrawCall] = [Clear(COLOR_BACKGROUND)]
    origin_x = config.actor_x * width
    origin_y = config.actor_y * height

    phase = state.phase
    if phase is Phase.IDLE:
        calls += _level(state.current_level, origin_x, origin_y, config)
        calls += _idle_actor(state, origin_x, origin_y, config)
    elif phase is Phase.TRYING_JUMP:
        calls += _jump_arc(state, origin_x, origin_y, config)
        calls += _level(state.current_level, origin_x, origin_y, config)
        calls.append(_actor(Frame.STRAINED, origin_x, origin_y, config.actor_width, config.actor_height, config))
        calls += _sweat(state, origin_x, origin_y, width, height, config)
    elif phase is Phase.JUMPING:
        x = origin_x + jump_offset_x(state, config)
        y = origin_y - jump_offset_y(state, config)
        calls += _level(state.current_level, origin_x, origin_y, config)
        calls.append(_actor(Frame.BLINK, x, y, config.actor_width * 0.9, config.actor_height * 1.1, config))
    elif phase is Phase.TRANSITION:
        # 着地後しばらく静止し、その後スライムと足場ごと元の位置へ戻る
        rest_ms = config.rest_ms
        elapsed = state.actor.animation_time_ms
        if elapsed <= rest_ms:
            progress = 0.0
        else:
            progress = clamp((elapsed - rest_ms) / (config.transition_duration_ms - rest_ms), 0.0, 1.0)
        x = origin_x + jump_distance(state.actor.power, config) * (1.0 - progress)
        calls += _level(state.current_level, x, origin_y, config)
        calls += _idle_actor(state, x, origin_y, config)

    calls += _ui(state, height, debug)
    return calls


def _level(level: Level, x: float, y: float, config: SlimeConfig) -> list[DrawCall]:
    """足場を描画する（x, y はスライムが立つ位置）"""
    unit = config.unit_width
    left = x + level.distance_units * unit
    w = level.length * unit
    return [
        FillRect(left, y, w, 6, COLOR_PLATFORM),
        FillRect(left, y + 6, w, 2, COLOR_PLATFORM_EDGE),
    ]


def _actor(frame: Frame, x: float, y: float, w: float, h: float, config: SlimeConfig) -> Blit:
    return Blit(
        x=x,
        y=y,
        w=w,
        h=h,
        u=frame.value * config.actor_width,
        v=0,
        src_w=config.actor_width,
        src_h=config.actor_height,
    )


def _idle_actor(state: GameState, x: float, y: float, config: SlimeConfig) -> list[DrawCall]:
    # 呼吸するように高さを揺らす
    seconds = state.actor.animation_time_ms / 1000.0
    height = config.actor_height + 2.0 * math.sin(seconds * 4.0) + 2.0
    frame = Frame.BLINK if is_blinking(state.actor.animation_time_ms, config) else Frame.IDLE
    return [_actor(frame, x, y, config.actor_width, height, config)]


def _jump_arc(state: GameState, origin_x: float, origin_y: float, config: SlimeConfig) -> list[DrawCall]:
    x0 = origin_x + config.actor_width / 2
    y0 = origin_y - config.actor_height / 2
    goal = jump_distance(state.actor.power, config)
    top = y0 - config.jump_height
    points = ((x0, y0), (x0, top), (x0 + goal, top), (x0 + goal, y0))
    return [Bezier(points=points, color=COLOR_ARC)]


def _sweat(
    state: GameState,
    origin_x: float,
    origin_y: float,
    width: int,
    height: int,
    config: SlimeConfig,
) -> list[DrawCall]:
    calls: list[DrawCall] = []
    life_max = config.sweat_life_ms
    for p in state.actor.sweat:
        # 生成直後の汗は一点に重なって見えるので描かない
        if p.remaining_life_ms <= 0 or p.remaining_life_ms >= life_max - config.sweat_draw_immunity_ms:
            continue
        # 少しずつ消えていくように平方根で透明度を決める
        alpha = math.sqrt(p.remaining_life_ms / life_max)
        cx = origin_x + p.x * width + config.actor_width / 2
        cy = origin_y + p.y * height - config.actor_height / 2
        calls.append(FillCircle(cx, cy, config.sweat_radius, COLOR_SWEAT, alpha))
    return calls


def _ui(state: GameState, height: int, debug: bool) -> list[DrawCall]:
    calls: list[DrawCall] = []
    if debug:
        lines = [
            "debug on",
            f"animation time (ms): {state.animation_time_ms:.2f}",
            f"power: {state.actor.power:.2f}",
            f"state: {state.phase.name.lower()}",
        ]
        # 画面左下から上に向かって並べる
        bottom = height - FONT_HEIGHT * 2
        for i, line in enumerate(reversed(lines)):
            calls.append(Text(1, bottom - FONT_HEIGHT * i, line, COLOR_DEBUG))
    calls.append(Text(1, 1, f"score: {state.score}", COLOR_SCORE))
    return calls


# --- プリミティブ -> Pyxel -----------------------------------------------------


def bezier_points(
    points: Sequence[tuple[float, float]],
    segments: int = BEZIER_SEGMENTS,
) -> list[tuple[float, float]]:
    """3 次ベジェ曲線を折れ線用の点列に分割する"""
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = points
    out: list[tuple[float, float]] = []
    for i in range(segments + 1):
        t = i / segments
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        out.append((a * x0 + b * x1 + c * x2 + d * x3, a * y0 + b * y1 + c * y2 + d * y3))
    return out


def paint(px: Any, calls: Sequence[DrawCall], image_bank: int = 0) -> None:
    """描画命令を Pyxel で実行する"""
    for call in calls:
        if isinstance(call, Clear):
            px.cls(call.color)
        elif isinstance(call, FillRect):
            px.rect(call.x, call.y, call.w, call.h, call.color)
        elif isinstance(call, FillCircle):
            _paint_circle(px, call)
        elif isinstance(call, Blit):
            _paint_blit(px, call, image_bank)
        elif isinstance(call, Bezier):
            pts = bezier_points(call.points)
            for (ax, ay), (bx, by) in zip(pts, pts[1:]):
                px.line(ax, ay, bx, by, call.color)
        elif isinstance(call, Text):
            px.text(call.x, call.y, call.text, call.color)


def _paint_circle(px: Any, call: FillCircle) -> None:
    # Pyxel には半透明が無いのでディザで代用する（古い版では無視）
    dither = getattr(px, "dither", None)
    if callable(dither):
        dither(call.alpha)
    px.circ(call.x, call.y, call.r, call.color)
    if callable(dither):
        dither(1.0)


def _paint_blit(px: Any, call: Blit, image_bank: int) -> None:
    # blt の scale は縦横同じ倍率なので使わず、最近傍で行・ピクセル単位に転送する
    dst_w = round(call.w)
    dst_h = round(call.h)
    if dst_w <= 0 or dst_h <= 0:
        return
    left = round(call.x)
    top = round(call.y) - dst_h
    if dst_w == call.src_w and dst_h == call.src_h:
        px.blt(left, top, image_bank, call.u, call.v, call.src_w, call.src_h, COLOR_KEY)
        return
    for j in range(dst_h):
        sv = call.v + j * call.src_h // dst_h
        if dst_w == call.src_w:
            px.blt(left, top + j, image_bank, call.u, sv, call.src_w, 1, COLOR_KEY)
            continue
        for i in range(dst_w):
            su = call.u + i * call.src_w // dst_w
            px.blt(left + i, top + j, image_bank, su, sv, 1, 1, COLOR_KEY)
