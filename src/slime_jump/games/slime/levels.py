from __future__ import annotations

from .state import Level

# 足場の長さ 5 = スライム 5 匹分、速度 0 = 静止
EASY_LEVEL = Level(length=5.0, speed=0.0, distance_units=2.0)
HARD_LEVEL = Level(length=1.5, speed=0.5, distance_units=3.0)


def next_level(difficulty: float) -> Level:
    """難易度から次の足場を決める。

    難易度による生成はまだ実装していないため、常に EASY_LEVEL を返す。
    """
    return EASY_LEVEL
