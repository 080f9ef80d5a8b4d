# ABOUTME: Structured logging configuration using loguru for round tracing.
# ABOUTME: Supports context fields (round, phase, character_id) and console/rotating file output.

import sys
from pathlib import Path
from typing import Any

from loguru import logger


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> | "
    "{extra}"
)

# File sinks keep the full date and function for post-session review
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} | {message} | {extra}"
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | Path | None = None,
    console_output: bool = True,
    rotation: str = "50 MB",
    retention: str = "14 days",
) -> None:
    """
    Replace loguru's default sink with the session sinks.

    Usage:
        >>> setup_logging(log_level="DEBUG", log_dir="logs")
        >>> log_round_event("Actions validated", round_number=3, phase="validating")

    Args:
        log_level: Minimum level, case-insensitive
        log_dir: Directory for daily rotating files; no file sink when None
        console_output: Log to stderr
        rotation: Size or interval at which a file rotates
        retention: How long rotated files are kept

    Raises:
        ValueError: If log_level is not a known level
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: '{log_level}'. Must be one of: {', '.join(LOG_LEVELS)}")

    logger.remove()
    if console_output:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, diagnose=False)

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(directory / "adventure_{time:YYYY-MM-DD}.log"),
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            diagnose=False,
            enqueue=True,
        )

    logger.bind(console=console_output, log_dir=str(log_dir) if log_dir else None).info(
        f"Logging configured at {level}"
    )


def log_round_event(
    message: str,
    round_number: int,
    phase: str,
    character_id: str | None = None,
    level: str = "INFO",
    **extra_context: Any
) -> None:
    """
    Log a round event with the standard context fields.

    Usage:
        >>> log_round_event(
        ...     "Roll resolved",
        ...     round_number=4,
        ...     phase="resolving",
        ...     character_id="char-1",
        ...     outcome="success",
        ... )

    Args:
        message: Log message
        round_number: Round number
        phase: Current round phase
        character_id: Optional acting character
        level: Log level (default: "INFO")
        **extra_context: Additional context fields
    """
    context: dict[str, Any] = {"round": round_number, "phase": phase, **extra_context}
    if character_id:
        context["character_id"] = character_id

    logger.bind(**context).log(level.upper(), message)


def log_phase_transition(from_phase: str, to_phase: str, round_number: int) -> None:
    """Log a round phase change"""
    logger.bind(from_phase=from_phase, to_phase=to_phase, round=round_number).debug(
        f"Phase transition: {from_phase} -> {to_phase}"
    )
