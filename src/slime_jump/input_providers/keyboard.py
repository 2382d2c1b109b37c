from __future__ import annotations

from queue import Queue

from ..events import Action, InputEvent
from . import HoldTracker


class KeyboardProvider:
    """
    Pyxel のキーボード状態をポーリングするデバッグ用入力プロバイダ。
    - Space -> ACTION1（押下 / 解放の両方を通知）
    - Enter -> ACTION2
    - Esc   -> QUIT
    """

    def __init__(self, note: str = "keyboard") -> None:
        self._space = HoldTracker()
        self._note = note

    def poll(self, px, out_queue: Queue) -> None:  # type: ignore[override]
        # Pyxel が利用可能になった後にキーコードへアクセスする（遅延参照）
        if px is None:
            return

        space = px.btn(px.KEY_SPACE)
        enter = px.btnp(px.KEY_RETURN)
        esc = px.btnp(px.KEY_ESCAPE)

        if self._space.update(space):
            value = 1.0 if self._space.held else 0.0
            out_queue.put(InputEvent(action=Action.ACTION1, value=value, note=self._note))
        if enter:
            out_queue.put(InputEvent(action=Action.ACTION2, note=self._note))
        if esc:
            out_queue.put(InputEvent(action=Action.QUIT, note=self._note))
