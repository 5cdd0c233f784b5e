"""Pluggable user-input capability for choices the engine cannot make alone.

The engine never calls ``input()`` directly. When a required value cannot be
auto-resolved it asks a Chooser:

    choose_one(prompt, options) -> 0-based index into options
    ask_value(prompt, default)  -> string (default may be empty)

NonInteractiveChooser is used when nothing is supplied, so automation and GUI
callers get an InputError instead of a blocked stdin read.
"""

from typing import Callable, Optional, Protocol

from .errors import InputError, SelectionError


class Chooser(Protocol):
    def choose_one(self, prompt: str, options: list[str]) -> int: ...

    def ask_value(self, prompt: str, default: str = "") -> str: ...


class NonInteractiveChooser:
    """Chooser that refuses every request."""

    def choose_one(self, prompt: str, options: list[str]) -> int:
        raise InputError(f"{prompt}: a choice is required but no interactive input is available")

    def ask_value(self, prompt: str, default: str = "") -> str:
        raise InputError(f"{prompt}: a value is required but no interactive input is available")


class ConsoleChooser:
    """Chooser reading from a console (stdin by default).

    Options are listed with 1-based numbers. A non-numeric or out-of-range
    answer raises SelectionError; there is no re-prompt.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._output = output_func

    def choose_one(self, prompt: str, options: list[str]) -> int:
        self._output(prompt)
        for number, option in enumerate(options, start=1):
            self._output(f"  [{number}] {option}")

        answer = self._input("Enter number: ").strip()
        try:
            number = int(answer)
        except ValueError:
            raise SelectionError(f"Invalid selection: {answer!r}")
        if number < 1 or number > len(options):
            raise SelectionError(f"Selection out of range: {number} (expected 1-{len(options)})")
        return number - 1

    def ask_value(self, prompt: str, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        while True:
            answer = self._input(f"{prompt}{suffix}: ").strip()
            if answer:
                return answer
            if default:
                return default
            # Empty default: input is mandatory


class ScriptedChooser:
    """Chooser replaying fixed answers, for automation callers.

    Args:
        choices: Answers for choose_one, as 0-based indexes, consumed in order
        values: Answers for ask_value, consumed in order; None means "take the default"
    """

    def __init__(self, choices: Optional[list[int]] = None, values: Optional[list[Optional[str]]] = None):
        self.choices = list(choices or [])
        self.values = list(values or [])
        self.prompts: list[str] = []

    def choose_one(self, prompt: str, options: list[str]) -> int:
        self.prompts.append(prompt)
        if not self.choices:
            raise InputError(f"{prompt}: no scripted choice left")
        return self.choices.pop(0)

    def ask_value(self, prompt: str, default: str = "") -> str:
        self.prompts.append(prompt)
        if not self.values:
            raise InputError(f"{prompt}: no scripted value left")
        value = self.values.pop(0)
        return default if value is None else value
