"""Utility helpers to execute the project's pytest suite programmatically."""

from __future__ import annotations

from typing import Optional, Sequence

import pytest

# Default arguments mirror the ones used by the repository's CI configuration.
DEFAULT_PYTEST_ARGS: tuple[str, ...] = ("-q", "tests")


def run_tests(args: Optional[Sequence[str]] = None) -> int:
    """Run pytest with the provided ``args`` and return the exit code.

    When ``args`` is ``None`` the suite under ``tests/`` runs with ``-q``.
    """

    pytest_args = list(args) if args is not None else list(DEFAULT_PYTEST_ARGS)
    return pytest.main(pytest_args)


def run_default() -> int:
    """Convenience wrapper that runs pytest with the default arguments."""

    return run_tests()


if __name__ == "__main__":  # pragma: no cover - manual execution utility
    raise SystemExit(run_default())
