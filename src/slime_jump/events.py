from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional
import time


class Action(Enum):
    # ゲーム内で扱う抽象アクション
    ACTION1 = auto()   # 主ボタン（押しっぱなしでチャージ）
    ACTION2 = auto()   # サブボタン（決定・一時停止など）
    QUIT = auto()      # 終了要求


@dataclass
class InputEvent:
    # 入力イベント（抽象アクション＋任意の値）
    action: Action
    value: float = 1.0  # 1.0 = 押下、0.0 = 解放
    timestamp: float = field(default_factory=time.time)  # イベント発生時刻（秒）
    note: Optional[str] = None  # デバッグ用メモ

    @property
    def pressed(self) -> bool:
        return self.value >= 0.5


@dataclass
class InputState:
    """ポインタ押下中かどうかだけを保持する入力状態。

    イベントはフレーム先頭でまとめて適用されるため、
    update の途中で値が変わることはない。
    """

    held: bool = False

    def apply(self, event: InputEvent) -> None:
        if event.action == Action.ACTION1:
            self.held = event.pressed

    def reset(self) -> None:
        self.held = False
