"""Tests for the command line entry point."""
import pytest

from slime_jump import __version__
from slime_jump.__main__ import build_parser, build_providers, main, make_configurator
from slime_jump.games.slime.game import SlimeGame
from slime_jump.input_providers.keyboard import KeyboardProvider
from slime_jump.input_providers.pointer import PointerProvider


class TestMain:
    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_list(self, capsys):
        main(["--list"])
        out = capsys.readouterr().out
        assert "- slime (local)" in out
        assert "- bounce (local)" in out

    def test_unknown_game(self):
        with pytest.raises(SystemExit, match="not found"):
            main(["--game", "nope"])


class TestProviders:
    def test_default_is_pointer_and_keyboard(self):
        providers = build_providers(None)
        assert [type(p) for p in providers] == [PointerProvider, KeyboardProvider]

    def test_keyboard_is_always_added(self):
        providers = build_providers(["pointer"])
        assert isinstance(providers[-1], KeyboardProvider)

    def test_unknown_provider(self):
        with pytest.raises(SystemExit, match="Unknown provider"):
            build_providers(["joystick"])


def test_configurator_applies_debug_and_sprite_sheet(tmp_path):
    args = build_parser().parse_args(["--debug", "--sprite-sheet", str(tmp_path / "s.png")])
    game = SlimeGame()
    make_configurator(args)(game)
    assert game.debug is True
    assert game.sprite_sheet == tmp_path / "s.png"
