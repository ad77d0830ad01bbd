# -*- coding: utf-8 -*-
import logging
import sys
from typing import Any, Optional

import colorama
from colorama import Fore, Style

from .config import get_settings

colorama.init()


class ColorFormatter(logging.Formatter):
    """Colour console records by level."""

    LEVEL_COLORS = {
        'DEBUG': Style.DIM,
        'INFO': Fore.CYAN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelname, '')
        return f"{color}{msg}{Style.RESET_ALL}"


class ConquestLogger:
    """Logger for the rules engine with coloured console output and an optional log file."""

    EVENT_ICONS = {
        'game_created': '🎮',
        'territory_conquered': '🏆',
        'player_eliminated': '💀',
        'game_won': '🎉',
        'turn_ended': '🔄',
        'game_saved': '💾',
        'game_loaded': '📂',
    }

    def __init__(self):
        self.setup_logging()

    def setup_logging(self):
        """Setup structured logging."""
        settings = get_settings()
        self.logger = logging.getLogger('conquest')
        self.logger.setLevel(logging.DEBUG)

        # Handlers are process-wide; don't stack them on re-initialisation
        if self.logger.handlers:
            return

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, settings.log_level, logging.INFO))
        console_handler.setFormatter(ColorFormatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        self.logger.addHandler(console_handler)

        if settings.log_file:
            try:
                file_handler = logging.FileHandler(settings.log_file)
            except OSError as e:
                self.logger.warning(f"Cannot open log file {settings.log_file}: {e}")
            else:
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                ))
                self.logger.addHandler(file_handler)

    def log_game_event(self, event_type: str, message: str, game_id: Optional[str] = None):
        """Log significant game events."""
        icon = self.EVENT_ICONS.get(event_type, '📢')
        game_info = f" [{game_id[:8]}]" if game_id else ""
        self.logger.info(f"{icon}{game_info} {event_type.upper()}: {message}")

    def log_combat_result(self, attacker: str, defender: str, from_territory: str,
                          to_territory: str, result: Any, game_id: Optional[str] = None):
        """Log combat results with dice detail at debug level."""
        game_info = f"[{game_id[:8]}] " if game_id else ""
        outcome = "CONQUERED" if result.territory_conquered else "DEFENDED"
        self.logger.debug(
            f"{game_info}BATTLE {from_territory} -> {to_territory}: "
            f"{attacker} {result.attacker_dice} lost {result.attacker_losses}, "
            f"{defender} {result.defender_dice} lost {result.defender_losses} ({outcome})"
        )

    def log_error(self, error: str, context: str = ""):
        """Log errors."""
        context_str = f" ({context})" if context else ""
        self.logger.error(f"ERROR{context_str}: {error}")

    def log_info(self, message: str):
        """Log general information."""
        self.logger.info(message)

    def log_warning(self, message: str):
        """Log warnings."""
        self.logger.warning(message)


# Global logger instance
conquest_logger = ConquestLogger()
