"""
Keyboard - non-blocking key reads from a raw (cbreak) terminal

RawTerminal puts stdin in cbreak mode with signal keys off for the
lifetime of the `with` block and hands back decoded key names:

    'up' 'down' 'left' 'right' 'enter' 'esc' 'backspace' 'tab' 'ctrl-c'
    or the literal character for anything printable
"""

import os
import select
import sys
import termios
import tty
from typing import List, Optional

ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[5~": "pageup",
    "\x1b[6~": "pagedown",
    "\x1b[3~": "delete",
}

CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
    "\x03": "ctrl-c",
    "\x04": "ctrl-d",
}


def decode_keys(data: str) -> List[str]:
    """Split one read's worth of terminal input into key names."""
    keys = []
    i = 0
    while i < len(data):
        char = data[i]
        if char == "\x1b":
            for sequence, name in ESCAPE_SEQUENCES.items():
                if data.startswith(sequence, i):
                    keys.append(name)
                    i += len(sequence)
                    break
            else:
                # Lone escape (or an unknown sequence - its tail arrives as plain chars)
                keys.append("esc")
                i += 1
            continue
        if char in CONTROL_KEYS:
            keys.append(CONTROL_KEYS[char])
            # \r\n from some terminals is one Enter
            if char == "\r" and data.startswith("\n", i + 1):
                i += 1
        elif char.isprintable():
            keys.append(char)
        i += 1
    return keys


class RawTerminal:
    """Context manager owning stdin's terminal mode."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self._saved = None

    def __enter__(self) -> "RawTerminal":
        if not os.isatty(self.fd):
            raise RuntimeError("an interactive terminal is required")
        self._saved = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd)
        # Ctrl-C arrives as the 'ctrl-c' key instead of SIGINT
        mode = termios.tcgetattr(self.fd)
        mode[tty.LFLAG] &= ~termios.ISIG
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None
        return False

    def read_keys(self, timeout: Optional[float]) -> List[str]:
        """Wait up to `timeout` seconds for input; [] when nothing arrived."""
        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return []
        data = os.read(self.fd, 1024)
        return decode_keys(data.decode("utf-8", errors="ignore"))
