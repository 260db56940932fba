#!/usr/bin/env python3
"""
Chronos Plantacerium - terminal front end for the Temporal Ring Engine

Fixed-rate loop: wait for keys until the next tick is due, route them,
tick the engine once, redraw. Leaving the loop (q, Ctrl-C or an error)
always goes through engine.shutdown() so unsaved text gets flushed.
"""

import argparse
import logging
import sys
import time
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from plantacerium.core.clock import ClockSource, SystemClock
from plantacerium.core.datashapes import Scene
from plantacerium.core.engine import TemporalRingEngine
from plantacerium.core.error_handler import (
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    configure_file_logging,
)
from plantacerium.core.errors import VaultError
from plantacerium.ui.input_router import InputRouter
from plantacerium.ui.keyboard import RawTerminal
from plantacerium.ui.renderer import SceneRenderer
from plantacerium.vault import JsonVaultStore, NoteVault

logger = logging.getLogger(__name__)


class ChronosApp:
    """Wires engine, router and renderer together and runs the tick loop"""

    def __init__(self, config, console: Optional[Console] = None,
                 clock: Optional[ClockSource] = None, debug: Optional[bool] = None):
        """
        Args:
            config: ChronosConfig class (see plantacerium.config.get_config)
            console: Rich Console to draw on
            clock: time source for the engine (SystemClock when omitted)
            debug: overrides config.DEBUG (shows low-severity alerts)

        Raises:
            VaultCorruptError / VaultError: the archive could not be loaded
        """
        self.config = config
        self.console = console or Console()
        self.error_handler = ErrorHandler(debug_mode=config.DEBUG if debug is None else debug)

        self.vault = NoteVault.open(JsonVaultStore(config.VAULT_PATH), clock=clock)
        self.engine = TemporalRingEngine(
            self.vault,
            clock=clock or SystemClock(),
            policy=config.ring_policy(),
            resonance_tolerance=config.RESONANCE_TOLERANCE,
            resonance_scope=config.resonance_scope(),
            inner_radius=config.INNER_RADIUS,
            ring_spacing=config.RING_SPACING,
            error_handler=self.error_handler,
        )
        self.router = InputRouter(self.engine, self.error_handler)
        self.renderer = SceneRenderer(self.console, controls=InputRouter.CONTROLS)
        self.tick_interval = config.tick_interval()

    def step(self, keys) -> Scene:
        """Route a batch of keys, then tick once."""
        for key in keys:
            with self.error_handler.create_context_manager(
                    ErrorCategory.UI_INPUT, ErrorSeverity.MEDIUM_ALERT, operation="handle_key"):
                self.router.handle_key(key)
        return self.engine.tick()

    def run(self) -> int:
        """Main loop. Returns a process exit code."""
        logger.info(f"Starting with {len(self.vault)} entries from {self.config.VAULT_PATH}")
        try:
            with RawTerminal() as terminal, Live(
                    self.renderer.render(self.engine.tick()),
                    console=self.console, screen=True, auto_refresh=False) as live:
                self._loop(terminal, live)
        except KeyboardInterrupt:
            # A SIGINT from outside the terminal can land anywhere in the loop
            self.engine.request_quit()
        finally:
            saved = self.engine.shutdown()

        if not saved:
            for alert in self.error_handler.get_alerts_for_ui():
                self.console.print(alert)
            return 1
        self.console.print(f"[dim]{len(self.vault)} entries sealed in {self.config.VAULT_PATH}[/dim]")
        return 0

    def _loop(self, terminal, live):
        next_tick = time.monotonic()
        while not self.engine.should_quit:
            next_tick += self.tick_interval
            timeout = max(0.0, next_tick - time.monotonic())
            scene = self.step(terminal.read_keys(timeout))

            with self.error_handler.create_context_manager(
                    ErrorCategory.UI_RENDERING, ErrorSeverity.MEDIUM_ALERT, operation="render"):
                live.update(self.renderer.render(scene), refresh=True)

            # Fell behind (slow terminal): resync instead of bursting ticks
            if time.monotonic() - next_tick > self.tick_interval:
                next_tick = time.monotonic()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plantacerium",
        description="Chronos Plantacerium - a tree-ring time journal for the terminal",
    )
    parser.add_argument("--vault", help="Path of the JSON archive (default: $CHRONOS_VAULT_PATH)")
    parser.add_argument("--env", choices=["development", "production", "test"],
                        help="Configuration profile (default: $CHRONOS_ENV or development)")
    parser.add_argument("--policy", choices=["dense", "absolute"],
                        help="Ring policy: one ring per entry day, or per calendar day")
    parser.add_argument("--tick-hz", type=float, help="Redraw rate, 1-60")
    parser.add_argument("--debug", action="store_true", help="Show low-severity alerts too")
    return parser


def apply_overrides(config, args):
    """Command-line flags win over the environment; returns a derived config class."""
    overrides = {}
    if args.vault:
        overrides['VAULT_PATH'] = args.vault
    if args.policy:
        overrides['RING_POLICY'] = args.policy
    if args.tick_hz is not None:
        overrides['TICK_HZ'] = args.tick_hz
    if not overrides:
        return config
    return type(config.__name__, (config,), overrides)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # .env must be loaded before the config module reads the environment
    load_dotenv()
    from plantacerium.config import get_config

    config = apply_overrides(get_config(args.env), args)
    configure_file_logging(config.LOG_FILE, config.LOG_LEVEL)

    console = Console()
    # Startup problems go through the same labels as in-app alerts
    startup_errors = ErrorHandler(debug_mode=args.debug, suppress_duplicate_seconds=0)

    issues = config.validate_config()
    if issues:
        for issue in issues:
            startup_errors.handle_error(ValueError(issue), ErrorCategory.CONFIGURATION,
                                        ErrorSeverity.CRITICAL_STOP, operation="validate_config")
        for alert in startup_errors.get_alerts_for_ui(max_alerts=len(issues)):
            console.print(alert)
        return 2

    logger.debug(f"Configuration: {config.summary()}")

    try:
        app = ChronosApp(config, console=console, debug=args.debug or None)
    except VaultError as e:
        startup_errors.handle_error(e, ErrorCategory.VAULT_READ, ErrorSeverity.CRITICAL_STOP,
                                    context=str(config.VAULT_PATH), operation="open_vault")
        alerts = Text("\n").join(Text.from_markup(alert) for alert in startup_errors.get_alerts_for_ui())
        console.print(Panel(alerts, title="Chronos Plantacerium", border_style="red"))
        return 1

    try:
        return app.run()
    except RuntimeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
