"""Logging setup for test sessions."""
import logging
import sys

# Transport libraries that log every request at INFO.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def setup_logging(level: str = "INFO") -> None:
    """Configure pageprobe logging on the root handler.

    Transport loggers are held at WARNING unless ``level`` is DEBUG, so session
    navigation lines are not doubled by per-request client output.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Raises:
        ValueError: Unknown level name.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger().setLevel(numeric)
    transport_level = logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
