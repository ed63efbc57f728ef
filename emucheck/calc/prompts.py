"""
Input providers used to complete a partial :class:`~emucheck.calc.core.CalcParam`.

The calculation never talks to a terminal directly. It asks an
:class:`InputProvider` for the values it is missing, which keeps the core
testable and lets a caller plug in any front end.

- :class:`InputProvider`: the two questions the calculation can ask
- :class:`ConsoleInputProvider`: answers them interactively through :mod:`click`
"""

from abc import ABC, abstractmethod
from typing import Sequence

import click


class InputProvider(ABC):
    """Source of the values missing from a calculation request."""

    @abstractmethod
    def choose(self, message: str, options: Sequence[str]) -> int:
        """
        Pick one option.

        :param message: Question to show.
        :param options: Non-empty list of option labels.

        :returns: 0-based index into ``options``.
        :rtype: int
        """

    @abstractmethod
    def ask_float(self, message: str) -> float:
        """Ask for a number."""


class ConsoleInputProvider(InputProvider):
    """
    Interactive provider: numbered menus and numeric prompts on the console.

    Invalid answers are rejected by :func:`click.prompt`, which asks again
    until a valid value is entered.
    """

    def choose(self, message: str, options: Sequence[str]) -> int:
        click.echo()
        for idx, option in enumerate(options, start=1):
            click.echo(f"{idx}. {option}")
        answer = click.prompt(message, type=click.IntRange(1, len(options)))
        return answer - 1

    def ask_float(self, message: str) -> float:
        return click.prompt(message, type=float)
