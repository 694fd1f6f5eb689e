"""
Step log: the ordered, human-readable transcript every engine run produces.

Each line starts with one of five prefixes, which consumers map to a
rendering type when they replay the transcript:

    [*]  system / milestone
    [+]  info / progress
    [✓]  success
    [!]  warning
    [-]  negative result (closed port, missing data)

Every line is also mirrored to the server log.
"""
import logging
from typing import Callable, List, Optional

SYSTEM = "[*]"
INFO = "[+]"
SUCCESS = "[✓]"
WARNING = "[!]"
NEGATIVE = "[-]"

PREFIX_TYPES = {
    SYSTEM: "system",
    INFO: "info",
    SUCCESS: "success",
    WARNING: "warning",
    NEGATIVE: "negative",
}

StepCb = Callable[[str], None]


def step_type(line: str) -> str:
    """Rendering type for a step line ("info" when it carries no known prefix)."""
    head = line.lstrip()[:3]
    return PREFIX_TYPES.get(head, "info")


class StepLog:
    def __init__(self, logger: logging.Logger, on_step: Optional[StepCb] = None):
        self._lines: List[str] = []
        self._log = logger
        self._on_step = on_step

    def add(self, prefix: str, message: str) -> str:
        line = f"{prefix} {message}"
        self._lines.append(line)
        level = logging.WARNING if prefix == WARNING else logging.INFO
        self._log.log(level, "%s", line)
        if self._on_step is not None:
            self._on_step(line)
        return line

    def system(self, message: str) -> str:
        return self.add(SYSTEM, message)

    def info(self, message: str) -> str:
        return self.add(INFO, message)

    def success(self, message: str) -> str:
        return self.add(SUCCESS, message)

    def warning(self, message: str) -> str:
        return self.add(WARNING, message)

    def negative(self, message: str) -> str:
        return self.add(NEGATIVE, message)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
