from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Optional, Union

from ...events import Action, InputEvent, InputState
from . import machine
from .assets import default_sprite_sheet, load_sprite_sheet
from .render import paint, render
from .state import CONFIG, Phase, SlimeConfig

_JUMP_SOUND = 0


class SlimeGame:
    """押しっぱなしでパワーを溜めて、離すと次の足場へ跳ぶスライムのゲーム"""

    width = 256
    height = 192

    _IMAGE_BANK = 0

    def __init__(self, config: SlimeConfig = CONFIG, seed: Optional[int] = None) -> None:
        self.next_game = None
        self.config = config
        self.debug = False
        self.sprite_sheet: Path = default_sprite_sheet()
        self.input = InputState()
        self._rng = random.Random(seed)
        self._px: Any = None
        self._sfx_ready = False
        self.reset()

    # --- 設定 ---

    def set_debug(self, enabled: bool) -> None:
        self.debug = bool(enabled)

    def set_sprite_sheet(self, path: Union[str, Path]) -> None:
        self.sprite_sheet = Path(path)

    def load_assets(self, px: Any) -> None:
        """スプライトシートを読み込む（失敗時は AssetLoadError）"""
        load_sprite_sheet(px, self.sprite_sheet, self._IMAGE_BANK)
        self._px = px
        self._setup_sounds(px)

    def _setup_sounds(self, px: Any) -> None:
        """ジャンプ音を設定する"""
        try:
            px.sounds[_JUMP_SOUND].set(
                notes="c3e3g3",
                tones="t",
                volumes="4",
                effects="n",
                speed=5,
            )
            self._sfx_ready = True
        except Exception:
            # 効果音が無くてもゲームは続行できる
            self._sfx_ready = False

    def reset(self) -> None:
        self.state = machine.new_game()
        self.input.reset()

    # --- 入力 ---

    def on_event(self, event: InputEvent) -> None:
        # ESCキーでメニューに戻る
        if event.action == Action.QUIT:
            from ..menu.game import MenuGame
            self.next_game = MenuGame()
            return
        self.input.apply(event)

    # --- 更新 ---

    def update(self, elapsed_ms: float) -> None:
        before = self.state.phase
        machine.update(self.state, elapsed_ms, self.input, self.config, self._rng)
        if before is Phase.TRYING_JUMP and self.state.phase is Phase.JUMPING:
            self._play_jump_sound()

    def _play_jump_sound(self) -> None:
        if self._px is None or not self._sfx_ready:
            return
        try:
            self._px.play(0, _JUMP_SOUND)
        except Exception:
            self._sfx_ready = False

    # --- 描画 ---

    def draw(self, px) -> None:
        calls = render(self.state, self.width, self.height, self.config, debug=self.debug)
        paint(px, calls, self._IMAGE_BANK)


GAME_CLASS = SlimeGame
