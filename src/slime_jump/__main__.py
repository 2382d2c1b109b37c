from __future__ import annotations

import argparse
from typing import Any, List, Optional

from . import __version__
from .app import App
from .registry import discover_games

DEFAULT_PROVIDERS = ["pointer", "keyboard"]


def _build_provider(spec: str):
    name, _, param = spec.partition(":")
    name = name.strip().lower()
    arg = param.strip()

    if name == "keyboard":
        from .input_providers.keyboard import KeyboardProvider

        return KeyboardProvider()
    if name == "pointer":
        from .input_providers.pointer import PointerProvider

        return PointerProvider()
    if name == "mediapipe_face":
        from .input_providers.mediapipe_face import FaceProvider

        camera_index = 0
        if arg:
            try:
                camera_index = int(arg)
            except ValueError as exc:
                raise SystemExit(f"Invalid camera index '{arg}' for mediapipe_face provider") from exc
        return FaceProvider(camera_index=camera_index)
    raise SystemExit(f"Unknown provider: {name}")


def build_providers(specs: Optional[List[str]]) -> List[Any]:
    provider_specs: List[str] = list(specs) if specs else list(DEFAULT_PROVIDERS)
    # Esc とデバッグ操作のため、キーボードは常に有効にする
    if not any(spec.split(":")[0].strip().lower() == "keyboard" for spec in provider_specs):
        provider_specs.append("keyboard")
    return [_build_provider(spec) for spec in provider_specs]


def make_configurator(args: argparse.Namespace):
    # ゲームが対応している設定だけを渡す
    def configure(game: Any) -> None:
        set_debug = getattr(game, "set_debug", None)
        if callable(set_debug):
            set_debug(args.debug)
        set_sprite_sheet = getattr(game, "set_sprite_sheet", None)
        if args.sprite_sheet and callable(set_sprite_sheet):
            set_sprite_sheet(args.sprite_sheet)

    return configure


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Slime Jump (Pyxel)")
    parser.add_argument("--game", default="slime", help="Game name (discovered)")
    parser.add_argument(
        "--provider",
        action="append",
        metavar="SPEC",
        help="Input provider spec (pointer, keyboard, mediapipe_face or mediapipe_face:1). Repeatable.",
    )
    parser.add_argument("--scale", type=int, default=3, help="Pyxel window scale")
    parser.add_argument("--sprite-sheet", metavar="PATH", help="Sprite sheet (.png or hex-row .txt)")
    parser.add_argument("--debug", action="store_true", help="Show state / power / timer overlay")
    parser.add_argument("--list", action="store_true", help="List discovered games and exit")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return

    games = discover_games()
    if args.list:
        if not games:
            print("No games found.")
            return
        for name, info in games.items():
            print(f"- {name} ({info.source})")
        return

    if args.game not in games:
        # 存在しないゲーム名が指定された場合は、利用可能な一覧を表示
        available = ", ".join(sorted(games.keys())) or "<none>"
        raise SystemExit(f"Game '{args.game}' not found. Available: {available}")

    configure = make_configurator(args)
    game = games[args.game].cls()
    configure(game)

    providers = build_providers(args.provider)
    app = App(game=game, providers=providers, scale=args.scale, configure=configure)
    if not app.run():
        raise SystemExit(1)


if __name__ == "__main__":
    main()
