from __future__ import annotations

from queue import Queue

from ..events import Action, InputEvent
from . import HoldTracker


class PointerProvider:
    """
    マウスの左ボタンを ACTION1 として通知する入力プロバイダ。
    押した時に value=1.0、離した時に value=0.0 のイベントを出す。
    """

    def __init__(self, note: str = "pointer") -> None:
        self._button = HoldTracker()
        self._note = note

    def poll(self, px, out_queue: Queue) -> None:  # type: ignore[override]
        if px is None:
            return
        if self._button.update(px.btn(px.MOUSE_BUTTON_LEFT)):
            value = 1.0 if self._button.held else 0.0
            out_queue.put(InputEvent(action=Action.ACTION1, value=value, note=self._note))
