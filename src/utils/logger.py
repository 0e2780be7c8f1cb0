"""
Logging utility for the LOCADZ marketplace.

Services log through structlog. ``setup_logger`` routes those events into the
standard library so a single logger can feed a colored console and, when
``log_file`` is given, a JSON lines file.
"""
import logging
import sys
from typing import Optional
from colorama import Fore, Style, init
import structlog

init(autoreset=True)

LEVEL_COLORS = {
    'debug': Fore.CYAN,
    'info': Fore.GREEN,
    'warning': Fore.YELLOW,
    'error': Fore.RED,
    'critical': Fore.MAGENTA + Style.BRIGHT,
}

SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def colorize_level(_, __, event_dict):
    """structlog processor painting the level name for terminals."""
    level = event_dict.get('level', '')
    color = LEVEL_COLORS.get(level)
    if color:
        event_dict['level'] = f"{color}{level.upper()}{Style.RESET_ALL}"
        if level in ('warning', 'error', 'critical'):
            event_dict['event'] = f"{color}{event_dict.get('event')}{Style.RESET_ALL}"
    return event_dict


def console_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            colorize_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
    )


def setup_logger(
    name: str = "locadz",
    level: str = "INFO",
    log_file: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Set up structured logging.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a JSON lines log file

    Returns:
        Configured structured logger
    """
    structlog.configure(
        processors=[structlog.stdlib.filter_by_level, *SHARED_PROCESSORS,
                    structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Handlers sit on the root logger so every service's named logger reaches them
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    installed = [h for h in root_logger.handlers if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)]
    if not installed:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter())
        root_logger.addHandler(console_handler)

    if log_file and not any(isinstance(h, logging.FileHandler) for h in installed):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(json_formatter())
        root_logger.addHandler(file_handler)

    return structlog.get_logger(name)


def get_logger(name: str = "locadz") -> structlog.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


class SyncLogger:
    """Tracks the outcome of replaying locally stored records into Supabase."""

    def __init__(self, logger: structlog.BoundLogger):
        self.logger = logger
        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict:
        return {
            'records_seen': 0,
            'records_synced': 0,
            'records_skipped': 0,
            'errors': 0,
            'collections': {}
        }

    def log_synced(self, collection: str, record_id: str):
        """Log a record pushed to the remote table."""
        self.stats['records_seen'] += 1
        self.stats['records_synced'] += 1
        self.stats['collections'][collection] = self.stats['collections'].get(collection, 0) + 1
        self.logger.info("Record synced", collection=collection, record_id=record_id)

    def log_skipped(self, collection: str, record_id: str, reason: str):
        """Log a record left in the local store."""
        self.stats['records_seen'] += 1
        self.stats['records_skipped'] += 1
        self.logger.warning("Record skipped", collection=collection, record_id=record_id, reason=reason)

    def log_error(self, error: Exception, context: str = ""):
        """Log an error."""
        self.stats['errors'] += 1
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context
        )

    def print_summary(self):
        """Print a summary of the sync run."""
        self.logger.info("Sync summary", **self.stats)

        print(f"\n{Fore.CYAN}{'='*50}")
        print(f"{Fore.WHITE}LOCAL STORE SYNC SUMMARY")
        print(f"{Fore.CYAN}{'='*50}")
        print(f"{Fore.GREEN}✓ Records seen: {self.stats['records_seen']}")
        print(f"{Fore.BLUE}✓ Records synced: {self.stats['records_synced']}")
        print(f"{Fore.YELLOW}⚠ Records skipped: {self.stats['records_skipped']}")
        print(f"{Fore.RED}✗ Errors: {self.stats['errors']}")

        if self.stats['collections']:
            print(f"\n{Fore.WHITE}By Collection:")
            for collection, count in self.stats['collections'].items():
                print(f"  {Fore.CYAN}{collection}: {count}")

        print(f"{Fore.CYAN}{'='*50}\n")

    def reset_stats(self):
        """Reset statistics."""
        self.stats = self._empty_stats()
