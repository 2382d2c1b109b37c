"""Find playable games.

Two sources are merged: subpackages of ``slime_jump.games`` that have a
``game`` module exporting ``GAME_CLASS``, and entry points registered by
other distributions under the ``slime_jump.games`` group. Entry points win
on name clashes so a plugin can replace a bundled game.
"""
from __future__ import annotations

import importlib
import pkgutil
import sys
import traceback
from dataclasses import dataclass
from importlib import metadata
from typing import Any, Dict, Optional

LOCAL_PACKAGE = "slime_jump.games"
ENTRY_POINT_GROUP = "slime_jump.games"


@dataclass
class GameInfo:
    name: str
    cls: type
    source: str  # "local" or the distribution name


def _maybe_get_game_class(obj: Any) -> Optional[type]:
    if isinstance(obj, type):
        return obj
    game_class = getattr(obj, "GAME_CLASS", None)
    if isinstance(game_class, type):
        return game_class
    if not callable(obj):
        return None
    # ゲームクラスを返すファクトリ関数
    try:
        produced = obj()
    except Exception:
        return None
    return produced if isinstance(produced, type) else None


def discover_local_games(base_pkg: str = LOCAL_PACKAGE) -> Dict[str, GameInfo]:
    try:
        pkg = importlib.import_module(base_pkg)
    except ImportError:
        return {}

    found: Dict[str, GameInfo] = {}
    for sub in pkgutil.iter_modules(pkg.__path__):
        if not sub.ispkg:
            continue
        try:
            mod = importlib.import_module(f"{base_pkg}.{sub.name}.game")
        except Exception:
            # 1 つ壊れていても残りは遊べるようにする
            traceback.print_exc(file=sys.stderr)
            continue
        cls = _maybe_get_game_class(mod)
        if cls is not None:
            found[sub.name] = GameInfo(name=sub.name, cls=cls, source="local")
    return found


def discover_entrypoint_games(group: str = ENTRY_POINT_GROUP) -> Dict[str, GameInfo]:
    found: Dict[str, GameInfo] = {}
    for ep in metadata.entry_points(group=group):
        try:
            obj = ep.load()
        except Exception:
            traceback.print_exc(file=sys.stderr)
            continue
        cls = _maybe_get_game_class(obj)
        if cls is None:
            continue
        dist = getattr(ep, "dist", None)
        found[ep.name] = GameInfo(name=ep.name, cls=cls, source=getattr(dist, "name", None) or ep.module)
    return found


def discover_games() -> Dict[str, GameInfo]:
    games = discover_local_games()
    games.update(discover_entrypoint_games())
    return games
