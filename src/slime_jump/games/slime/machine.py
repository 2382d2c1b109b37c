from __future__ import annotations

import math
import random
from typing import Optional

from ...events import InputState
from .levels import next_level
from .state import CONFIG, GameState, Level, Phase, SlimeConfig, SweatParticle


def clamp(x: float, lo: float, hi: float) -> float:
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def jump_distance(power: float, config: SlimeConfig = CONFIG) -> float:
    """パワーからジャンプの水平距離（ピクセル）を求める。

    半周期のコサインで補間するため、パワー 0 で 0、最大パワーで
    ``unit_width * max_power`` になり、その間は単調増加する。
    """
    p = clamp(power, 0.0, config.max_power)
    return ((1.0 - math.cos(p * math.pi / config.max_power)) / 2.0) * config.unit_width * config.max_power


def jump_progress(state: GameState, config: SlimeConfig = CONFIG) -> float:
    return clamp(state.actor.animation_time_ms / config.jump_duration_ms, 0.0, 1.0)


def jump_offset_x(state: GameState, config: SlimeConfig = CONFIG) -> float:
    # 水平方向は等速
    return jump_distance(state.actor.power, config) * jump_progress(state, config)


def jump_offset_y(state: GameState, config: SlimeConfig = CONFIG) -> float:
    # 垂直方向は放物線（t=0.5 で最高点）
    t = jump_progress(state, config)
    return (-4.0 * t * t + 4.0 * t) * config.jump_height


def landed(power: float, level: Level, config: SlimeConfig = CONFIG) -> bool:
    """ジャンプ距離が足場の範囲に収まっているか"""
    near = level.distance_units * config.unit_width
    far = (level.distance_units + level.length) * config.unit_width
    return near <= jump_distance(power, config) <= far


def new_sweat(rng: random.Random, config: SlimeConfig = CONFIG) -> SweatParticle:
    return SweatParticle(
        x=0.0,
        y=0.0,
        dx=rng.random() * 0.5 - 0.25,
        dy=-1.0 * (rng.random() * 0.1 + 0.3),
        remaining_life_ms=config.sweat_life_ms,
    )


def new_game() -> GameState:
    return GameState(current_level=next_level(1.0))


def update(
    state: GameState,
    elapsed_ms: float,
    inp: InputState,
    config: SlimeConfig = CONFIG,
    rng: Optional[random.Random] = None,
) -> None:
    """1フレーム分ゲーム状態を進める（1回の呼び出しで遷移は高々1回）"""
    dt = max(0.0, float(elapsed_ms))
    rng = rng or random

    state.animation_time_ms += dt
    state.actor.animation_time_ms += dt

    phase = state.phase
    if phase is Phase.IDLE:
        if inp.held:
            _enter(state, Phase.TRYING_JUMP)
    elif phase is Phase.TRYING_JUMP:
        if not inp.held:
            _enter(state, Phase.JUMPING)
        else:
            _charge(state, dt, config)
            _update_sweat(state, dt, config, rng)
    elif phase is Phase.JUMPING:
        if state.animation_time_ms >= config.jump_duration_ms:
            _finish_jump(state, config)
            _enter(state, Phase.TRANSITION)
    elif phase is Phase.TRANSITION:
        if state.animation_time_ms >= config.transition_duration_ms:
            state.actor.power = 0.0
            state.current_level = next_level(state.difficulty)
            _enter(state, Phase.IDLE)
    else:
        raise ValueError(f"unknown phase: {phase!r}")


def _enter(state: GameState, phase: Phase) -> None:
    """状態に入る時の処理（タイマーのリセットなど）"""
    state.phase = phase
    state.animation_time_ms = 0.0
    state.actor.animation_time_ms = 0.0
    if phase is Phase.TRYING_JUMP:
        state.actor.sweat = []
        state.actor.power = 0.0
    elif phase is Phase.JUMPING:
        state.actor.sweat = []


def _charge(state: GameState, dt: float, config: SlimeConfig) -> None:
    power = state.actor.power + config.power_per_second * dt / 1000.0
    state.actor.power = clamp(power, 0.0, config.max_power)


def _update_sweat(state: GameState, dt: float, config: SlimeConfig, rng: random.Random) -> None:
    """汗パーティクルを移動・寿命更新し、一定間隔で新しく生成する"""
    seconds = dt / 1000.0
    alive: list[SweatParticle] = []
    for p in state.actor.sweat:
        p.x += p.dx * seconds
        p.y += p.dy * seconds
        p.dy += config.gravity * seconds
        p.remaining_life_ms -= dt
        if p.remaining_life_ms > 0:
            alive.append(p)
    state.actor.sweat = alive

    count = len(alive)
    if count < config.max_sweat and state.actor.animation_time_ms / config.sweat_spawn_interval_ms >= count:
        alive.append(new_sweat(rng, config))


def _finish_jump(state: GameState, config: SlimeConfig) -> None:
    # 着地判定（足場に乗ればスコア加算）。難易度はジャンプ毎に上がる
    if landed(state.actor.power, state.current_level, config):
        state.score += 1
    state.difficulty += 1.0
