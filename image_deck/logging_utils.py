"""Logging helpers for consistent console output."""
import logging
import sys
import tempfile
from pathlib import Path
from typing import Optional


def setup_logging(verbose: bool = False, log_path: Optional[Path] = None, level: Optional[str] = None) -> None:
    """Configure root logging for the app."""
    if level is None:
        level = "DEBUG" if verbose else "INFO"
    handlers = [logging.StreamHandler()]
    if log_path is not None:
        log_path = Path(log_path)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
        except OSError as exc:
            fallback = Path(tempfile.gettempdir()) / "image_deck.run.log"
            try:
                handlers.append(logging.FileHandler(fallback, mode="a", encoding="utf-8"))
                print(
                    f"[WARN] Failed to open log file at {log_path} ({exc}). "
                    f"Logging to {fallback} instead.",
                    file=sys.stderr,
                )
            except OSError:
                print(
                    f"[WARN] Failed to open log file at {log_path} ({exc}). "
                    "Continuing without file logging.",
                    file=sys.stderr,
                )
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    # google-genai and httpx are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
