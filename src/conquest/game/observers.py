from typing import TYPE_CHECKING, Protocol

from colorama import Fore, Style

if TYPE_CHECKING:
    from .game_state import GameState
    from .territory import Territory


class GameObserver(Protocol):
    """Anything that wants to follow a game: views, recorders, loggers."""

    def on_state_changed(self, game: "GameState") -> None:
        ...

    def on_log_line(self, message: str) -> None:
        ...


class DefenderPrompt(Protocol):
    """Asks a human defender how many armies (1 or 2) to defend with."""

    def choose_defenders(self, game: "GameState", territory: "Territory") -> int:
        ...


class ConsoleObserver:
    """Prints the action log to the terminal, coloured by event."""

    COLOR_RULES = (
        ('won the game', Fore.GREEN + Style.BRIGHT),
        ('eliminated', Fore.MAGENTA + Style.BRIGHT),
        ('conquered', Fore.YELLOW + Style.BRIGHT),
        ('is attacking', Fore.RED),
        ('ended their turn', Fore.CYAN),
        ('has placed', Fore.GREEN),
        ('has moved', Fore.BLUE),
    )

    def __init__(self, show_state: bool = False):
        self.show_state = show_state

    def on_state_changed(self, game: "GameState") -> None:
        if not self.show_state:
            return
        current = game.current_competitor
        name = current.name if current else "nobody"
        print(f"{Style.DIM}[{game.phase.value}] current: {name}{Style.RESET_ALL}")

    def on_log_line(self, message: str) -> None:
        color = ""
        for keyword, rule_color in self.COLOR_RULES:
            if keyword in message:
                color = rule_color
                break
        print(f"{color}{message}{Style.RESET_ALL}" if color else message)
