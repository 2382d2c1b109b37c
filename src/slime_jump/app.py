from __future__ import annotations

import queue
from queue import Queue
import sys
import time
import traceback
from typing import Any, Callable, List, Optional

from .clock import FrameClock
from .events import Action, InputEvent
from .games.slime.assets import AssetLoadError

TITLE = "Slime Jump"

# メニューでは誤検出の多い表情入力を無視する
MENU_INPUT_NOTES = {"keyboard", "pointer"}


class App:
    def __init__(
        self,
        game: Any,
        providers: List[Any],
        scale: int = 3,
        clock: Optional[FrameClock] = None,
        time_source: Callable[[], float] = time.monotonic,
        configure: Optional[Callable[[Any], None]] = None,
    ) -> None:
        self.game = game
        self.providers = providers
        self.scale = scale
        self.clock = clock or FrameClock()
        self.events: "Queue[InputEvent]" = Queue()
        self.running = False
        self._time_source = time_source
        # ゲーム切り替え時にも CLI の設定を引き継ぐためのフック
        self._configure = configure
        self._px: Any = None  # Pyxel モジュール（遅延読み込み）
        self._menu_cls = None
        self._game_error_logged = False
        self._closed = False

    # --- ライフサイクル ---

    def run(self, px: Any = None) -> bool:
        """ウィンドウを作ってメインループを開始する。

        アセットの読み込みに失敗した場合はエラーを表示し、ループを開始せずに
        False を返す（再試行はしない）。
        """
        if px is None:
            import pyxel  # ユニットテスト時の import 失敗を避けるため遅延インポート

            px = pyxel
        self._px = px

        try:
            px.init(self.game.width, self.game.height, title=TITLE, display_scale=self.scale)
        except TypeError:
            # 古い Pyxel は display_scale を受け付けない
            px.init(self.game.width, self.game.height, title=TITLE)
        px.mouse(True)

        try:
            self._load_assets(self.game)
        except AssetLoadError as exc:
            print(f"[App] {exc}", file=sys.stderr)
            return False

        # スレッド型プロバイダを起動
        for p in self.providers:
            if hasattr(p, "start"):
                try:
                    p.start(self.events)
                except Exception:
                    traceback.print_exc(file=sys.stderr)

        self.running = True
        self.clock.reset()
        px.run(self._update, self._draw)
        return True

    def stop(self) -> None:
        """次のフレームでループを終了させる"""
        self.running = False

    def _shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for p in self.providers:
            if hasattr(p, "stop"):
                try:
                    p.stop()
                except Exception:
                    traceback.print_exc(file=sys.stderr)
        self._px.quit()

    def _load_assets(self, game: Any) -> None:
        loader = getattr(game, "load_assets", None)
        if callable(loader):
            loader(self._px)

    # --- フレーム処理 ---

    def _update(self) -> None:
        self.tick(self._time_source() * 1000.0)

    def tick(self, now_ms: float) -> None:
        """1フレーム分の処理: 入力のポーリング → イベント転送 → 更新 → ゲーム切り替え"""
        assert self._px is not None
        if not self.running:
            self._shutdown()
            return

        elapsed_ms = self.clock.tick(now_ms)
        self._poll_providers()
        self._dispatch_events()

        try:
            self.game.update(elapsed_ms)
        except Exception:
            # ログが毎フレーム大量に出ないよう、ゲーム毎に一度だけ詳細を出力
            if not self._game_error_logged:
                traceback.print_exc(file=sys.stderr)
                self._game_error_logged = True

        # ゲーム側からのゲーム切り替え要求に対応
        next_game = getattr(self.game, "next_game", None)
        if next_game is not None:
            self.game.next_game = None
            self._switch(next_game)

    def _poll_providers(self) -> None:
        # 1フレーム毎に Pyxel へアクセスが必要なプロバイダをポーリング
        for p in self.providers:
            if not hasattr(p, "poll"):
                continue
            try:
                p.poll(self._px, self.events)
            except Exception:
                if not getattr(p, "_error_logged", False):
                    traceback.print_exc(file=sys.stderr)
                    setattr(p, "_error_logged", True)

    def _dispatch_events(self) -> None:
        # 入力イベントキューを空にしつつゲームへ転送
        menu_active = self._is_menu_game()
        while True:
            try:
                e = self.events.get_nowait()
            except queue.Empty:
                break
            if menu_active and e.note not in MENU_INPUT_NOTES:
                continue
            if e.action == Action.QUIT and menu_active:
                self.stop()
                continue
            try:
                self.game.on_event(e)
            except Exception:
                traceback.print_exc(file=sys.stderr)

    def _switch(self, next_game: Any) -> None:
        if self._configure is not None:
            self._configure(next_game)
        try:
            self._load_assets(next_game)
        except AssetLoadError as exc:
            # 読み込めないゲームには切り替えない
            print(f"[App] {exc}", file=sys.stderr)
            return
        self.game = next_game
        self._game_error_logged = False

    def _draw(self) -> None:
        assert self._px is not None
        try:
            self.game.draw(self._px)
        except Exception:
            # 描画で例外が起きても画面をクリアして安全に継続
            if not self._game_error_logged:
                traceback.print_exc(file=sys.stderr)
                self._game_error_logged = True
            self._px.cls(0)

    def _is_menu_game(self) -> bool:
        if self._menu_cls is None:
            from .games.menu.game import MenuGame

            self._menu_cls = MenuGame
        return isinstance(self.game, self._menu_cls)
