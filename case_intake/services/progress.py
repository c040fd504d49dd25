from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

ImportProgressBar is handed to import_cases() as its progress callback. The
orchestrator reports sparsely (first row, every Nth row, last row), so the bar
jumps to the reported position instead of ticking once per row. In non-TTY
environments (CI, redirected output) no bar is created at all.
"""

__all__ = [
    "ImportProgressBar",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ImportProgressBar:
    """Progress callback rendering a single tqdm bar over the accepted rows."""

    def __init__(self, *, description: str = "Importing cases", enabled: bool | None = None) -> None:
        self.description = description
        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: TqdmType[Any] | None = None
        self.last_label = ""

    def _ensure_bar(self, total: int) -> TqdmType[Any]:
        if self.pbar is None:
            self.pbar = tqdm(
                total=total,
                desc=self.description,
                unit="case",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        return self.pbar

    def __call__(self, current: int, total: int, percentage: int, label: str) -> None:
        self.last_label = label
        if not self.enabled:
            return
        pbar = self._ensure_bar(total)
        if current > pbar.n:
            pbar.update(current - pbar.n)
        pbar.set_postfix_str(f"{percentage}% {label}"[:30])

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ImportProgressBar:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
