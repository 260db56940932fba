#!/usr/bin/env python3
"""
SceneRenderer - Display layer for the ring engine
Turns one immutable Scene into a rich renderable; never touches engine state.

Screen layout:
    header   - title banner
    body     - ring canvas | cursor / resonance side panel
    footer   - breath, dilation, zoom, experience units, controls
    overlays - editor or goto prompt, alerts
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from rich.console import Console, Group
from rich.layout import Layout
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from plantacerium.core.datashapes import BreathPhase, InteractionMode, Scene

TITLE = "✶ CHRONOS PLANTACERIUM ✶"
SUBTITLE = "AETERNUM PRECISION ARCHIVE"

# Terminal cells are roughly twice as tall as they are wide
CELL_ASPECT = 2.0

# How far past the outermost ring a fully inhaled ripple reaches
EMANATION_REACH = 0.35

# Circumference in cells, widened for the horizontal stretch
TWO_PI_CELLS = math.tau * CELL_ASPECT

# ===== Palette =====
GOLD = "rgb(212,175,55)"
DIM_GOLD = "rgb(120,100,40)"
LIVE = "bold rgb(255,120,80)"
CURSOR = "bold white"
RIPPLE = "rgb(90,140,120)"

PHASE_STYLES = {
    BreathPhase.INHALE: "rgb(120,200,160)",
    BreathPhase.HOLD: "bold rgb(240,220,140)",
    BreathPhase.EXHALE: "rgb(110,130,200)",
}

PETALS = " ·∘○◎❀✿"


class RingCanvas:
    """
    Character grid with polar plotting. Angle 0 is midnight at the top,
    increasing clockwise; radius is in the Scene's abstract units.
    """

    def __init__(self, width: int, height: int, unit_radius: float):
        self.width = max(width, 3)
        self.height = max(height, 3)
        self.cx = (self.width - 1) / 2.0
        self.cy = (self.height - 1) / 2.0
        fit = min(self.cy, self.cx / CELL_ASPECT)
        self.cells_per_unit = fit / unit_radius if unit_radius > 0 else fit
        self._chars = [[" "] * self.width for _ in range(self.height)]
        self._styles: List[List[Optional[str]]] = [[None] * self.width for _ in range(self.height)]

    def cell_of(self, radius: float, angle: float) -> Tuple[int, int]:
        r = radius * self.cells_per_unit
        col = int(round(self.cx + r * CELL_ASPECT * math.sin(angle)))
        row = int(round(self.cy - r * math.cos(angle)))
        return row, col

    def put(self, row: int, col: int, char: str, style: Optional[str] = None):
        if 0 <= row < self.height and 0 <= col < self.width:
            self._chars[row][col] = char
            self._styles[row][col] = style

    def plot(self, radius: float, angle: float, char: str, style: Optional[str] = None):
        row, col = self.cell_of(radius, angle)
        self.put(row, col, char, style)

    def circle(self, radius: float, char: str, style: Optional[str] = None):
        # Enough samples that neighbouring points land in adjacent cells
        samples = max(24, int(TWO_PI_CELLS * radius * self.cells_per_unit))
        for i in range(samples):
            self.plot(radius, i * math.tau / samples, char, style)

    def ray(self, radius: float, angle: float, char: str, style: Optional[str] = None):
        steps = max(2, int(radius * self.cells_per_unit * CELL_ASPECT))
        for i in range(1, steps + 1):
            self.plot(radius * i / steps, angle, char, style)

    def to_text(self) -> Text:
        text = Text()
        for row_index in range(self.height):
            if row_index:
                text.append("\n")
            for char, style in zip(self._chars[row_index], self._styles[row_index]):
                text.append(char, style=style)
        return text


def draw_scene(scene: Scene, width: int, height: int) -> RingCanvas:
    """Plot rings, ripples, the live hand, entry marks, resonance and cursor."""
    outer = scene.max_radius
    # Fit the unzoomed diagram so zooming visibly grows or shrinks it
    unit = (outer / scene.zoom if scene.zoom else outer) * (1.0 + EMANATION_REACH)
    canvas = RingCanvas(width, height, unit)

    for ripple in scene.emanations:
        canvas.circle(outer * (1.0 + EMANATION_REACH * ripple), "∙", RIPPLE)

    for ring in scene.rings:
        style = GOLD if ring.index == scene.cursor.ring_index else DIM_GOLD
        canvas.circle(ring.radius, "·", style)

    canvas.ray(outer, scene.live_angle_exact, "•", LIVE)

    resonant = {event.key: event.strength for event in scene.resonance}
    for ring in scene.rings:
        for mark in ring.marks:
            strength = resonant.get(mark.key)
            if strength is None:
                canvas.plot(ring.radius, mark.angle_radians, "◆", GOLD)
            else:
                glow = "bold rgb(255,240,160)" if strength >= 0.5 else "rgb(255,220,120)"
                canvas.plot(ring.radius, mark.angle_radians, "✺", glow)

    cursor_radius = _ring_radius(scene, scene.cursor.ring_index)
    canvas.plot(cursor_radius, scene.cursor.angle_radians, "◎", CURSOR)

    petal_index = int(round(scene.oscillator.scale * (len(PETALS) - 1)))
    canvas.put(int(round(canvas.cy)), int(round(canvas.cx)), PETALS[petal_index],
               PHASE_STYLES[scene.oscillator.phase])
    return canvas


def _ring_radius(scene: Scene, ring_index: int) -> float:
    for ring in scene.rings:
        if ring.index == ring_index:
            return ring.radius
    return scene.max_radius


class SceneRenderer:
    """
    Builds the full-screen renderable for a Scene.
    The app loop owns the rich Live; this class only produces what it shows.
    """

    def __init__(self, console: Console, controls: Sequence[Tuple[str, str]] = ()):
        """
        Args:
            console: Rich Console the Live display writes to (used for sizing)
            controls: (key, action) pairs for the footer
        """
        self.console = console
        self.controls = list(controls)

    # ===== Full frame =====

    def render(self, scene: Scene) -> Layout:
        width, height = self.console.size
        layout = Layout(name="root")
        layout.split_column(
            Layout(self.header(), name="header", size=4),
            Layout(name="body"),
            Layout(self.footer(scene), name="footer", size=5),
        )

        if scene.mode is InteractionMode.EDITING:
            side = [self.editor_panel(scene), self.resonance_panel(scene)]
        else:
            side = [self.cursor_panel(scene), self.resonance_panel(scene)]
        if scene.mode is InteractionMode.GOTO:
            side.insert(0, self.goto_panel(scene))
        if scene.alerts:
            side.insert(0, self.alert_panel(scene.alerts))

        canvas_width = max(10, (width * 3) // 5 - 4)
        canvas_height = max(5, height - 4 - 5 - 2)
        layout["body"].split_row(
            Layout(self.ring_panel(scene, canvas_width, canvas_height), name="rings", ratio=3),
            Layout(Group(*side), name="side", ratio=2),
        )
        return layout

    # ===== Pieces =====

    def header(self) -> Panel:
        banner = Text(justify="center")
        banner.append(TITLE + "\n", style=f"bold {GOLD}")
        banner.append(SUBTITLE, style=DIM_GOLD)
        return Panel(banner, border_style=DIM_GOLD)

    def ring_panel(self, scene: Scene, width: int, height: int) -> Panel:
        canvas = draw_scene(scene, width, height)
        title = f"{scene.live_key.date.isoformat()}  {scene.timestamp.strftime('%H:%M:%S')}"
        return Panel(canvas.to_text(), title=title, border_style=DIM_GOLD)

    def cursor_panel(self, scene: Scene) -> Panel:
        table = Table.grid(padding=(0, 1))
        table.add_column(style="cyan")
        table.add_column()
        table.add_row("Node", str(scene.cursor_key))
        table.add_row("Ring", f"{scene.cursor.ring_index} ({scene.cursor_key.date.isoformat()})")
        if scene.cursor_key == scene.live_key:
            table.add_row("", Text("● present moment", style=LIVE))

        if scene.cursor_entry is None:
            body = Text("empty minute - Enter to write", style="dim")
        else:
            body = Markdown(scene.cursor_entry.body)
        return Panel(Group(table, Text(""), body), title="Cursor", border_style="cyan")

    def resonance_panel(self, scene: Scene) -> Panel:
        if not scene.resonance:
            return Panel(Text("silence", style="dim"), title="Resonance", border_style=RIPPLE)
        table = Table.grid(padding=(0, 1))
        table.add_column()
        table.add_column(justify="right")
        for event in scene.resonance[:5]:
            table.add_row(Text(f"✺ {event.key}", style=GOLD), f"{event.strength:.0%}")
        return Panel(table, title="Resonance", border_style=GOLD)

    def editor_panel(self, scene: Scene) -> Panel:
        draft = scene.draft or ""
        raw = Text(draft, style="white")
        raw.append("▌", style="blink")
        parts = [raw]
        if draft.strip():
            parts += [Text("─" * 20, style="dim"), Markdown(draft)]
        return Panel(
            Group(*parts),
            title=f"TEMPORAL OBSERVATION VAULT · {scene.cursor_key}",
            subtitle=Text("[ESC] TO SEAL NODE"),
            border_style=GOLD,
        )

    def goto_panel(self, scene: Scene) -> Panel:
        prompt = Text("jump to ", style="dim")
        prompt.append(scene.draft or "", style="bold white")
        prompt.append("▌", style="blink")
        return Panel(prompt, title="GOTO  YYYY-MM-DD-HH-mm",
                     subtitle=Text("[Enter] jump · [Esc] cancel"), border_style="magenta")

    def alert_panel(self, alerts: Iterable[str]) -> Panel:
        lines = Text("\n").join(Text.from_markup(alert) for alert in alerts)
        return Panel(lines, title="Alerts", border_style="red")

    def footer(self, scene: Scene) -> Panel:
        phase = scene.oscillator
        table = Table.grid(expand=True, padding=(0, 2))
        for _ in range(4):
            table.add_column(justify="center")
        table.add_row(
            Text(f"BREATH {phase.phase.value.upper()} {phase.progress:.0%}",
                 style=PHASE_STYLES[phase.phase]),
            Text(f"DILATION {scene.dilation:.1f}x", style=GOLD),
            Text(f"ZOOM {scene.zoom:.1f}x", style=GOLD),
            Text(f"EXPERIENCE UNITS {scene.experience_seconds}", style=DIM_GOLD),
        )
        controls = Text(justify="center")
        for key, action in self.controls:
            controls.append(f" {key} ", style="bold cyan")
            controls.append(f"{action} ", style="dim")
        return Panel(Group(table, controls), border_style=DIM_GOLD)
