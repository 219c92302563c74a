import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Pattern, Tuple

_NUM = r"(?<![\d.])(\d{2,3})(?!\d|\.\d)"
_LINKING = r"(?:\s+(?:is|of|was|at))?\s*:?\s*"
# a number right after "/" or "over" is the diastolic half of a blood pressure
_NOT_DIASTOLIC = r"(?<!/)(?<!/ )(?<!over )"


@dataclass(frozen=True)
class VitalPattern:
    """
    One vital sign: a handful of regexes and a renderer for the match.

    When several regexes match, the one starting earliest in the text wins,
    so the first mention is kept.
    """

    key: str
    patterns: Tuple[Pattern, ...]
    render: Callable[["re.Match"], str]

    def match(self, text: str) -> Optional[str]:
        best = None
        for pattern in self.patterns:
            m = pattern.search(text)
            if m and (best is None or m.start() < best.start()):
                best = m
        if best is None:
            return None
        return self.render(best)


BLOOD_PRESSURE = VitalPattern(
    key="bloodPressure",
    patterns=(
        re.compile(_NUM + r"\s*(?:/|over)\s*" + _NUM, re.I),
    ),
    render=lambda m: f"{m.group(1)}/{m.group(2)}",
)

HEART_RATE = VitalPattern(
    key="heartRate",
    patterns=(
        re.compile(_NOT_DIASTOLIC + _NUM + r"\s*(?:bpm|beats per minute|heart rate)", re.I),
        re.compile(r"(?:heart rate|pulse)" + _LINKING + _NUM, re.I),
    ),
    render=lambda m: f"{m.group(1)} bpm",
)

TEMPERATURE = VitalPattern(
    key="temperature",
    patterns=(
        re.compile(r"(?<![\d.])(\d{2,3}\.\d)(?!\d)\s*(?:°|degrees)?", re.I),
        re.compile(_NUM + r"\s*(?:°|degrees)", re.I),
    ),
    render=lambda m: f"{m.group(1)}°F",
)

RESPIRATORY_RATE = VitalPattern(
    key="respiratoryRate",
    patterns=(
        re.compile(_NOT_DIASTOLIC + _NUM + r"\s*(?:breaths|respiratory rate)", re.I),
        re.compile(r"respiratory rate" + _LINKING + _NUM, re.I),
    ),
    render=lambda m: f"{m.group(1)}/min",
)

DEFAULT_VITAL_PATTERNS: Tuple[VitalPattern, ...] = (
    BLOOD_PRESSURE,
    HEART_RATE,
    TEMPERATURE,
    RESPIRATORY_RATE,
)


def extract_vitals(
    text: str,
    patterns: Tuple[VitalPattern, ...] = DEFAULT_VITAL_PATTERNS,
) -> Dict[str, str]:
    vitals: Dict[str, str] = {}
    for pattern in patterns:
        value = pattern.match(text)
        if value is not None:
            vitals[pattern.key] = value
    return vitals
