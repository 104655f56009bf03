from __future__ import annotations

import sys
from typing import IO, Optional

from tqdm import tqdm

BAR_FORMAT = "[{elapsed}] {bar:40} {n_fmt}/{total_fmt} ({remaining})"
DONE_MESSAGE = "Scan Completed Successfully!"


class TqdmProgress:
    def __init__(self, total: int, file: Optional[IO[str]] = None) -> None:
        self._file = file or sys.stderr
        self._bar = tqdm(
            total=total,
            bar_format=BAR_FORMAT,
            ascii=" >=",
            file=self._file,
            leave=True,
        )

    def advance(self, n: int = 1) -> None:
        self._bar.update(n)

    def finish(self, message: str = DONE_MESSAGE) -> None:
        self._bar.close()
        tqdm.write(message, file=self._file)


class NullProgress:
    def advance(self, n: int = 1) -> None:
        pass

    def finish(self, message: str = DONE_MESSAGE) -> None:
        pass
