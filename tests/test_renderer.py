#!/usr/bin/env python3
"""
Tests for SceneRenderer and the ring canvas

Rendering is checked against a recording Console, so these tests see the
same text a terminal would.
"""

import math

import pytest
from rich.console import Console

from plantacerium.core.engine import TemporalRingEngine
from plantacerium.ui.input_router import InputRouter
from plantacerium.ui.renderer import RingCanvas, SceneRenderer, draw_scene


@pytest.fixture
def console():
    return Console(record=True, width=120, height=40, color_system=None)


@pytest.fixture
def engine(populated_vault, fixed_clock, error_handler):
    return TemporalRingEngine(populated_vault, clock=fixed_clock, error_handler=error_handler)


def render_text(console, engine):
    renderer = SceneRenderer(console, controls=InputRouter.CONTROLS)
    console.print(renderer.render(engine.tick()))
    return console.export_text()


class TestCanvas:

    def test_midnight_is_straight_up(self):
        canvas = RingCanvas(41, 21, unit_radius=1.0)
        row, col = canvas.cell_of(1.0, 0.0)
        assert col == 20
        assert row < 10

    def test_six_oclock_is_right(self):
        canvas = RingCanvas(41, 21, unit_radius=1.0)
        row, col = canvas.cell_of(1.0, math.pi / 2)
        assert row == 10
        assert col > 20

    def test_out_of_bounds_ignored(self):
        canvas = RingCanvas(10, 5, unit_radius=1.0)
        canvas.put(-1, 50, "x")
        assert "x" not in canvas.to_text().plain

    def test_scene_marks_and_cursor_drawn(self, engine):
        engine.move_ring(-1)
        canvas = draw_scene(engine.tick(), 60, 30)
        text = canvas.to_text().plain
        assert "◎" in text
        assert "◆" in text
        assert "✺" in text  # the 14:30 entry resonates with the 14:30 clock
        assert len(text.splitlines()) == 30


class TestFullFrame:

    def test_frame_has_title_and_footer(self, console, engine):
        """HAPPY PATH: header, cursor panel and footer all render."""
        text = render_text(console, engine)
        assert "CHRONOS PLANTACERIUM" in text
        assert "AETERNUM PRECISION ARCHIVE" in text
        assert "2024-03-15-14-30" in text
        assert "EXPERIENCE UNITS 52200" in text
        assert "DILATION 1.0x" in text
        assert "half past two" in text

    def test_empty_minute_hint(self, console, engine):
        engine.move_minute(1)
        assert "empty minute" in render_text(console, engine)

    def test_editor_panel(self, console, engine):
        engine.move_minute(1)
        engine.open_entry()
        engine.type_text("# Dawn chorus")
        text = render_text(console, engine)
        assert "TEMPORAL OBSERVATION VAULT" in text
        assert "[ESC] TO SEAL NODE" in text
        assert "Dawn chorus" in text

    def test_goto_prompt(self, console, engine):
        engine.open_goto()
        engine.type_text("2024-01")
        text = render_text(console, engine)
        assert "GOTO" in text
        assert "2024-01" in text

    def test_alerts_shown(self, console, engine):
        engine.open_goto()
        engine.submit_goto()
        assert "invalid time" in render_text(console, engine)

    def test_small_terminal_does_not_crash(self, engine):
        tiny = Console(record=True, width=30, height=12, color_system=None)
        tiny.print(SceneRenderer(tiny).render(engine.tick()))
        assert "CHRONOS" in tiny.export_text()
