from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Phase(Enum):
    # ゲーム全体の状態（スライムの動作に対応）
    IDLE = auto()          # 入力受付中
    TRYING_JUMP = auto()   # 押しっぱなしでチャージ中
    JUMPING = auto()       # ジャンプ中（入力を受け付けない）
    TRANSITION = auto()    # 次の足場へ移動中（入力を受け付けない）


@dataclass(frozen=True)
class SlimeConfig:
    # 時間関連（ミリ秒）
    jump_duration_ms: float = 500.0
    transition_duration_ms: float = 500.0
    rest_ratio: float = 0.3              # 遷移開始から静止している割合
    blink_ms: float = 100.0
    blink_cycle_s: float = 5.0
    blink_second_offset_s: float = 0.5   # 2回目のまばたきまでの秒数

    # 汗パーティクル
    sweat_life_ms: float = 500.0
    sweat_spawn_interval_ms: float = 300.0
    max_sweat: int = 20
    sweat_draw_immunity_ms: float = 50.0
    sweat_radius: int = 2
    gravity: float = 0.5                 # 画面比率 / 秒^2

    # パワー
    power_per_second: float = 2.0
    max_power: float = 4.0

    # 画面比率で表した待機位置
    actor_x: float = 0.2
    actor_y: float = 0.5

    # ピクセル単位（256x192 画面向けに縮小）
    actor_width: int = 32
    actor_height: int = 26
    jump_height: int = 52

    @property
    def unit_width(self) -> int:
        # 距離の 1 単位はスライム 1 匹分の幅
        return self.actor_width

    @property
    def rest_ms(self) -> float:
        return self.transition_duration_ms * self.rest_ratio


CONFIG = SlimeConfig()


@dataclass(frozen=True)
class Level:
    """次の足場の長さ・移動速度・スライムからの距離（いずれもスライム幅単位）"""
    length: float
    speed: float
    distance_units: float


@dataclass
class SweatParticle:
    x: float    # スライム原点からの相対位置（画面比率）
    y: float
    dx: float   # 速度（画面比率 / 秒）
    dy: float
    remaining_life_ms: float


@dataclass
class ActorState:
    power: float = 0.0
    animation_time_ms: float = 0.0
    sweat: list[SweatParticle] = field(default_factory=list)


@dataclass
class GameState:
    current_level: Level
    score: int = 0
    difficulty: float = 1.0
    phase: Phase = Phase.IDLE
    animation_time_ms: float = 0.0
    actor: ActorState = field(default_factory=ActorState)
