"""
Input Router - decoded keys -> engine handlers

Separates key routing from the engine's logic and from rendering.
This class handles:
- Key validation (is this key bound in the current mode?)
- Key routing (call the right engine handler)
- Reporting unknown keys through the error handler (debug only)

Design principles:
- InputRouter ROUTES keys, doesn't implement them
- Engine state changes happen only in TemporalRingEngine handlers
- Raw key codes are decoded elsewhere (keyboard.decode_keys)
"""

from typing import Dict

from plantacerium.core.datashapes import InteractionMode
from plantacerium.core.engine import COARSE_MINUTE_STEP, TemporalRingEngine
from plantacerium.core.error_handler import ErrorCategory, ErrorHandler, ErrorSeverity


class InputRouter:
    """Handles key parsing and routing per interaction mode"""

    # Browsing bindings: key -> (engine method, args)
    BROWSING_BINDINGS = {
        'right': ('move_minute', (1,)),
        'left': ('move_minute', (-1,)),
        '>': ('move_minute', (COARSE_MINUTE_STEP,)),
        '<': ('move_minute', (-COARSE_MINUTE_STEP,)),
        'up': ('move_ring', (1,)),
        'down': ('move_ring', (-1,)),
        'enter': ('open_entry', ()),
        '+': ('zoom_in', ()),
        '=': ('zoom_in', ()),
        '-': ('zoom_out', ()),
        ']': ('dilate', ()),
        '[': ('contract', ()),
        'n': ('jump_to_live', ()),
        'g': ('open_goto', ()),
        'q': ('request_quit', ()),
        'Q': ('request_quit', ()),
    }

    # Help rows shown in the footer, in display order
    CONTROLS = [
        ("←/→", "minute"),
        ("</>", "5 min"),
        ("↑/↓", "ring"),
        ("Enter", "open"),
        ("Esc", "seal"),
        ("+/-", "zoom"),
        ("[/]", "breath"),
        ("n", "now"),
        ("g", "goto"),
        ("q", "quit"),
    ]

    def __init__(self, engine: TemporalRingEngine, error_handler: ErrorHandler):
        """
        Initialize input router

        Args:
            engine: TemporalRingEngine instance (owner of all state changes)
            error_handler: ErrorHandler instance (for error reporting)
        """
        self.engine = engine
        self.error_handler = error_handler

    def handle_key(self, key: str) -> Dict:
        """
        Main key routing logic

        Returns:
            Dict with:
                - handled: bool (was the key bound in this mode?)
                - should_quit: bool (has the user asked to leave?)
        """
        mode = self.engine.mode
        if key == 'ctrl-c':
            # Always leaves; shutdown seals an open draft
            self.engine.request_quit()
            handled = True
        elif mode is InteractionMode.EDITING:
            handled = self._route_editing(key)
        elif mode is InteractionMode.GOTO:
            handled = self._route_goto(key)
        else:
            handled = self._route_browsing(key)
        return {'handled': handled, 'should_quit': self.engine.should_quit}

    def _route_browsing(self, key: str) -> bool:
        binding = self.BROWSING_BINDINGS.get(key)
        if binding is None:
            self.error_handler.handle_error(
                KeyError(f"unbound key {key!r}"),
                ErrorCategory.UI_INPUT,
                ErrorSeverity.LOW_DEBUG,
                operation="route_browsing",
            )
            return False
        method_name, args = binding
        getattr(self.engine, method_name)(*args)
        return True

    def _route_editing(self, key: str) -> bool:
        if key == 'esc':
            self.engine.seal_entry()
        elif key == 'enter':
            self.engine.newline()
        elif key == 'backspace':
            self.engine.backspace()
        elif key == 'tab':
            self.engine.type_text("    ")
        elif len(key) == 1:
            self.engine.type_text(key)
        else:
            return False
        return True

    def _route_goto(self, key: str) -> bool:
        if key == 'enter':
            self.engine.submit_goto()
        elif key == 'esc':
            self.engine.cancel()
        elif key == 'backspace':
            self.engine.backspace()
        elif len(key) == 1:
            self.engine.type_text(key)
        else:
            return False
        return True
