import math
import re
from dataclasses import dataclass

from .exceptions import ConfigurationError

_NUMBER = r"[-+]?\d+(?:\.\d+)?"
_RANGE_RE = re.compile(rf"^(?P<invert>@)?(?:(?P<start>~|{_NUMBER}):)?(?P<end>{_NUMBER})?$")


@dataclass(frozen=True)
class ThresholdRange:
    """
    Monitoring-plugins threshold range.

    Syntax:
      "10"     alert if value < 0 or > 10
      "10:"    alert if value < 10
      "~:10"   alert if value > 10
      "10:20"  alert if value < 10 or > 20
      "@10:20" alert if 10 <= value <= 20
    """

    start: float = 0.0
    end: float = math.inf
    invert: bool = False
    text: str = ""

    @classmethod
    def parse(cls, text: str) -> "ThresholdRange":
        raw = (text or "").strip()
        m = _RANGE_RE.match(raw)
        if not raw or not m or (m.group("start") is None and m.group("end") is None):
            raise ConfigurationError(f"Invalid threshold range: {text!r}")

        start_raw = m.group("start")
        if start_raw is None:
            start = 0.0
        elif start_raw == "~":
            start = -math.inf
        else:
            start = float(start_raw)

        end_raw = m.group("end")
        end = float(end_raw) if end_raw is not None else math.inf

        if start > end:
            raise ConfigurationError(f"Invalid threshold range (start > end): {text!r}")

        return cls(start=start, end=end, invert=bool(m.group("invert")), text=raw)

    def violates(self, value: float) -> bool:
        inside = self.start <= value <= self.end
        return inside if self.invert else not inside

    def __str__(self) -> str:
        return self.text
