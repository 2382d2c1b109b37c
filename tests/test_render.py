"""Tests for the slime renderer and the Pyxel painter."""
import copy
import math

import pytest

from slime_jump.games.slime import machine
from slime_jump.games.slime.render import (
    BEZIER_SEGMENTS,
    Bezier,
    Blit,
    Clear,
    FillCircle,
    FillRect,
    Frame,
    Text,
    bezier_points,
    is_blinking,
    paint,
    render,
)
from slime_jump.games.slime.state import CONFIG, Phase, SweatParticle

W, H = 256, 192
ORIGIN_X = CONFIG.actor_x * W
ORIGIN_Y = CONFIG.actor_y * H


def state_in(phase, power=0.0, actor_ms=0.0):
    state = machine.new_game()
    state.phase = phase
    state.actor.power = power
    state.actor.animation_time_ms = actor_ms
    return state


def blits(calls):
    return [c for c in calls if isinstance(c, Blit)]


class TestRenderPurity:
    def test_render_twice_gives_same_calls(self):
        state = state_in(Phase.TRYING_JUMP, power=2.0, actor_ms=300.0)
        state.actor.sweat = [SweatParticle(0.01, -0.02, 0.1, -0.3, 250.0)]
        assert render(state, W, H) == render(state, W, H)

    def test_render_does_not_mutate_state(self):
        for phase in Phase:
            state = state_in(phase, power=3.0, actor_ms=200.0)
            state.actor.sweat = [SweatParticle(0.0, 0.0, 0.1, -0.3, 250.0)]
            before = copy.deepcopy(state)
            render(state, W, H, debug=True)
            assert state == before

    def test_starts_with_clear_and_ends_with_score(self):
        for phase in Phase:
            calls = render(state_in(phase), W, H)
            assert isinstance(calls[0], Clear)
            assert calls[-1] == Text(1, 1, "score: 0", calls[-1].color)


class TestPhaseScenes:
    def test_idle_draws_platform_and_idle_slime(self):
        calls = render(state_in(Phase.IDLE), W, H)
        rects = [c for c in calls if isinstance(c, FillRect)]
        assert rects[0].x == pytest.approx(ORIGIN_X + 2 * CONFIG.unit_width)
        assert rects[0].w == pytest.approx(5 * CONFIG.unit_width)
        (slime,) = blits(calls)
        assert slime.u == Frame.IDLE.value * CONFIG.actor_width
        assert (slime.x, slime.y) == (pytest.approx(ORIGIN_X), pytest.approx(ORIGIN_Y))

    def test_idle_height_pulses(self):
        (slime,) = blits(render(state_in(Phase.IDLE, actor_ms=math.pi / 8 * 1000), W, H))
        # sin(4t) == 1 -> height + 4
        assert slime.h == pytest.approx(CONFIG.actor_height + 4)

    def test_trying_jump_draws_arc_to_jump_distance(self):
        calls = render(state_in(Phase.TRYING_JUMP, power=CONFIG.max_power), W, H)
        (arc,) = [c for c in calls if isinstance(c, Bezier)]
        start, _, _, end = arc.points
        assert end[0] - start[0] == pytest.approx(CONFIG.unit_width * CONFIG.max_power)
        assert start[1] == end[1]
        (slime,) = blits(calls)
        assert slime.u == Frame.STRAINED.value * CONFIG.actor_width

    def test_fresh_and_dead_sweat_is_hidden(self):
        state = state_in(Phase.TRYING_JUMP)
        state.actor.sweat = [
            SweatParticle(0.0, 0.0, 0.0, 0.0, CONFIG.sweat_life_ms),
            SweatParticle(0.0, 0.0, 0.0, 0.0, 0.0),
            SweatParticle(0.1, -0.1, 0.0, 0.0, CONFIG.sweat_life_ms / 2),
        ]
        circles = [c for c in render(state, W, H) if isinstance(c, FillCircle)]
        assert len(circles) == 1
        assert circles[0].alpha == pytest.approx(math.sqrt(0.5))
        assert circles[0].x == pytest.approx(ORIGIN_X + 0.1 * W + CONFIG.actor_width / 2)

    def test_jumping_slime_follows_trajectory(self):
        state = state_in(Phase.JUMPING, power=CONFIG.max_power, actor_ms=CONFIG.jump_duration_ms / 2)
        (slime,) = blits(render(state, W, H))
        assert slime.x == pytest.approx(ORIGIN_X + CONFIG.unit_width * CONFIG.max_power / 2)
        assert slime.y == pytest.approx(ORIGIN_Y - CONFIG.jump_height)
        assert slime.w == pytest.approx(CONFIG.actor_width * 0.9)
        assert slime.h == pytest.approx(CONFIG.actor_height * 1.1)

    def test_transition_rests_then_slides_back(self):
        far = ORIGIN_X + machine.jump_distance(CONFIG.max_power)
        resting = state_in(Phase.TRANSITION, power=CONFIG.max_power, actor_ms=CONFIG.rest_ms / 2)
        (slime,) = blits(render(resting, W, H))
        assert slime.x == pytest.approx(far)

        done = state_in(Phase.TRANSITION, power=CONFIG.max_power, actor_ms=CONFIG.transition_duration_ms)
        (slime,) = blits(render(done, W, H))
        assert slime.x == pytest.approx(ORIGIN_X)

    def test_debug_overlay_lists_state(self):
        calls = render(state_in(Phase.TRYING_JUMP, power=1.5), W, H, debug=True)
        texts = [c.text for c in calls if isinstance(c, Text)]
        assert "debug on" in texts
        assert "power: 1.50" in texts
        assert "state: trying_jump" in texts

    def test_debug_overlay_off_by_default(self):
        texts = [c.text for c in render(state_in(Phase.IDLE), W, H) if isinstance(c, Text)]
        assert texts == ["score: 0"]


class TestBlink:
    @pytest.mark.parametrize(
        "ms, expected",
        [
            (50.0, False),     # first cycle never blinks
            (5050.0, True),    # start of an odd cycle
            (5300.0, False),
            (5550.0, True),    # second blink half a second later
            (5700.0, False),
            (10050.0, False),  # even cycle
            (15050.0, True),
        ],
    )
    def test_blink_windows(self, ms, expected):
        assert is_blinking(ms) is expected

    def test_idle_uses_blink_frame_while_blinking(self):
        (slime,) = blits(render(state_in(Phase.IDLE, actor_ms=5050.0), W, H))
        assert slime.u == Frame.BLINK.value * CONFIG.actor_width


class TestPaint:
    def test_bezier_points_hit_end_points(self):
        pts = bezier_points(((0, 0), (0, -10), (20, -10), (20, 0)), segments=8)
        assert len(pts) == 9
        assert pts[0] == pytest.approx((0, 0))
        assert pts[-1] == pytest.approx((20, 0))
        assert pts[4] == pytest.approx((10, -7.5))

    def test_paint_executes_each_primitive(self, px):
        calls = [
            Clear(7),
            FillRect(1, 2, 3, 4, 5),
            FillCircle(10, 10, 2, 8, alpha=0.5),
            Blit(x=50, y=100, w=32, h=26, u=32, v=0, src_w=32, src_h=26),
            Bezier(points=((0, 0), (0, -10), (20, -10), (20, 0)), color=13),
            Text(1, 1, "score: 0", 3),
        ]
        paint(px, calls)
        names = px.names()
        assert names[:2] == ["cls", "rect"]
        assert names[2:5] == ["dither", "circ", "dither"]
        assert names.count("line") == BEZIER_SEGMENTS
        assert names[-1] == "text"

    def test_blit_is_anchored_bottom_left(self, px):
        paint(px, [Blit(x=50, y=100, w=32, h=26, u=32, v=0, src_w=32, src_h=26)], image_bank=0)
        assert px.calls == [("blt", 50, 74, 0, 32, 0, 32, 26, 0)]

    def test_stretched_height_copies_whole_rows(self, px):
        paint(px, [Blit(x=50, y=100, w=32, h=52, u=32, v=0, src_w=32, src_h=26)])
        assert len(px.calls) == 52
        assert px.calls[0] == ("blt", 50, 48, 0, 32, 0, 32, 1, 0)
        assert px.calls[1][5] == 0  # 2 行ずつ同じ元の行
        assert px.calls[-1] == ("blt", 50, 99, 0, 32, 25, 32, 1, 0)

    def test_width_and_height_scale_independently(self, px):
        paint(px, [Blit(x=50, y=100, w=16, h=52, u=32, v=0, src_w=32, src_h=26)])
        xs = {c[1] for c in px.calls}
        ys = {c[2] for c in px.calls}
        assert (min(xs), max(xs)) == (50, 65)
        assert (min(ys), max(ys)) == (48, 99)
        assert px.calls[-1] == ("blt", 65, 99, 0, 62, 25, 1, 1, 0)

    def test_jumping_slime_is_narrow_and_tall_on_screen(self, px):
        state = state_in(Phase.JUMPING, power=2.0, actor_ms=100.0)
        paint(px, blits(render(state, W, H)))
        xs = {c[1] for c in px.calls}
        ys = {c[2] for c in px.calls}
        assert max(xs) - min(xs) + 1 == round(CONFIG.actor_width * 0.9)
        assert max(ys) - min(ys) + 1 == round(CONFIG.actor_height * 1.1)

    def test_full_frame_paints(self, px):
        state = state_in(Phase.TRYING_JUMP, power=2.0)
        paint(px, render(state, W, H))
        assert px.names()[0] == "cls"
        assert "blt" in px.names()
