from __future__ import annotations

from typing import Optional

MAX_FRAME_MS = 100.0


class FrameClock:
    """フレーム間の経過時間（ミリ秒）を計算する。

    タイムスタンプが巻き戻った場合は 0、長時間止まっていた場合は
    ``max_frame_ms`` に丸めて、状態が一気に進まないようにする。
    """

    def __init__(self, max_frame_ms: float = MAX_FRAME_MS) -> None:
        self.max_frame_ms = float(max_frame_ms)
        self._previous_ms: Optional[float] = None

    def tick(self, now_ms: float) -> float:
        previous = self._previous_ms
        self._previous_ms = float(now_ms)
        if previous is None:
            # 初回フレームは基準時刻が無いので経過 0 とする
            return 0.0
        elapsed = float(now_ms) - previous
        return min(self.max_frame_ms, max(0.0, elapsed))

    def reset(self) -> None:
        self._previous_ms = None
