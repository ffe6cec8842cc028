"""Configuration and data classes for formspam."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/112.0.5615.50 Safari/537.36"
)

Pair = Tuple[str, str]


@dataclass(frozen=True)
class Email:
    """Random ``username@domain`` address"""
    name: str
    domains: Tuple[str, ...]


@dataclass(frozen=True)
class YesNo:
    """Either "Yes" or "No". Not reachable from FFL text."""
    name: str


@dataclass(frozen=True)
class CellPhone:
    """US style ``(AAA) MMM-EEEE`` number"""
    name: str


@dataclass(frozen=True)
class ChooseAny:
    """Exactly one of the pairs is submitted"""
    options: Tuple[Pair, ...]


@dataclass(frozen=True)
class ChooseN:
    """Exactly ``n`` distinct pairs are submitted"""
    n: int
    pairs: Tuple[Pair, ...]


@dataclass(frozen=True)
class Date:
    """``MM/DD/YYYY`` with the year in ``[min_year, max_year]``"""
    name: str
    min_year: int
    max_year: int


@dataclass(frozen=True)
class CheckBoxes:
    """Each pair is submitted with probability 1/2"""
    pairs: Tuple[Pair, ...]


@dataclass(frozen=True)
class StringField:
    name: str
    max_len: int


@dataclass(frozen=True)
class OptionalString:
    name: str


@dataclass(frozen=True)
class Static:
    name: str
    value: str


@dataclass(frozen=True)
class Name:
    """Two random tokens joined by a space"""
    name: str
    max_len: int


FieldSpec = Union[
    Email, YesNo, CellPhone, ChooseAny, ChooseN, Date,
    CheckBoxes, StringField, OptionalString, Static, Name,
]


@dataclass
class EngineConfig:
    """Configuration for a submission run"""
    url: str
    max_open: int
    timeout: float = 20.0
    report_interval: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_redirects: int = 5
    shutdown_grace: float = 1.0
    seed: Optional[int] = None


@dataclass(frozen=True)
class Summary:
    """Counter snapshot taken at ``elapsed`` seconds into a run"""
    sent: int
    failed: int
    elapsed: float

    @property
    def rate(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.sent / self.elapsed
