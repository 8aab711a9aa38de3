import os
import sys
from typing import Callable


def enable_ansi_colors() -> bool:
    if not sys.stdout.isatty():
        return False
    if os.name != "nt":
        return True
    try:
        import ctypes

        kernel32 = ctypes.windll.kernel32
        handle = kernel32.GetStdHandle(-11)
        mode = ctypes.c_uint()
        if kernel32.GetConsoleMode(handle, ctypes.byref(mode)) == 0:
            return False
        if kernel32.SetConsoleMode(handle, mode.value | 0x0004) == 0:
            return False
        return True
    except Exception:
        return False


class TerminalUI:
    RESET = "\033[0m"
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"

    def __init__(self, pretty: bool, reader: Callable[[str], str] = input):
        self.pretty = pretty
        self.use_color = pretty and enable_ansi_colors()
        self.reader = reader

    def _color(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{self.RESET}"

    def _line(self, text: str) -> None:
        print(text, flush=True)

    def emit(self, text: str) -> None:
        # Raw output, kept free of tags so it can be piped.
        self._line(text)

    def info(self, msg: str) -> None:
        self._line(self._color("[INFO]", self.CYAN) + f" {msg}")

    def ok(self, msg: str) -> None:
        self._line(self._color("[ OK ]", self.GREEN) + f" {msg}")

    def warn(self, msg: str) -> None:
        self._line(self._color("[WARN]", self.YELLOW) + f" {msg}")

    def error(self, msg: str) -> None:
        self._line(self._color("[FAIL]", self.RED) + f" {msg}")

    def prompt(self, msg: str) -> str:
        """Ask the operator for one line. Raises EOFError when input is closed."""
        return self.reader(self._color("[ ?? ]", self.CYAN) + f" {msg} ")
