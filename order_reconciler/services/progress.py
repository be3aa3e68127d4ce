from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single bar over the order rows of the reconciliation pass. In non-TTY
environments (CI, redirected output) no bar is created, so logs stay free of
ANSI control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Row progress bar; a no-op when stdout is not a TTY."""

    def __init__(self, total: int, *, description: str = "Reconciling rows", unit: str = "row") -> None:
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit=unit,
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, steps: int = 1) -> None:
        self.current += steps
        if self.enabled and self.pbar is not None:
            self.pbar.update(steps)

    def set_postfix(self, **kwargs: Any) -> None:
        # refresh happens on the next update
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(refresh=False, **kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
