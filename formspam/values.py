"""Value generation for the different field kinds."""

import random
import string
from typing import Callable, Dict, List, Type

import rstr

from .config import (
    CellPhone,
    CheckBoxes,
    ChooseAny,
    ChooseN,
    Date,
    Email,
    FieldSpec,
    Name,
    OptionalString,
    Pair,
    Static,
    StringField,
    YesNo,
)
from .errors import GenerationError


EMAIL_CHARS = string.ascii_lowercase + string.digits
NAME_CHARS = string.ascii_letters + string.digits
STRING_CHARS = NAME_CHARS + '., '

# Days per month, February handled by days_in_month
MONTH_DAYS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def days_in_month(year: int, month: int) -> int:
    """Every fourth year is a leap year, centuries included."""
    if month == 2 and year % 4 == 0:
        return 29
    return MONTH_DAYS[month - 1]


class ValueGenerator:
    """Produces the form entries for a single field."""

    def __init__(self, rng: random.Random):
        self.rng = rng
        self.strings = rstr.Rstr(rng)
        self._generators: Dict[Type, Callable[..., List[Pair]]] = {
            Email: self._generate_email,
            YesNo: self._generate_yes_no,
            CellPhone: self._generate_cellphone,
            ChooseAny: self._generate_choose_any,
            ChooseN: self._generate_choose_n,
            Date: self._generate_date,
            CheckBoxes: self._generate_checkboxes,
            StringField: self._generate_string,
            OptionalString: self._generate_optional_string,
            Static: self._generate_static,
            Name: self._generate_name,
        }

    def generate(self, field: FieldSpec) -> List[Pair]:
        """Return the (name, value) entries ``field`` contributes this time."""
        gen_func = self._generators.get(type(field))
        if gen_func is None:
            raise GenerationError(f"No generator for field {field!r}")
        return gen_func(field)

    def _generate_email(self, field: Email) -> List[Pair]:
        if not field.domains:
            raise GenerationError(f"Field '{field.name}' has no email domains")
        username = self.strings.rstr(EMAIL_CHARS, 5, 14)
        domain = self.rng.choice(field.domains)
        return [(field.name, f"{username}@{domain}")]

    def _generate_yes_no(self, field: YesNo) -> List[Pair]:
        return [(field.name, self.rng.choice(("Yes", "No")))]

    def _generate_cellphone(self, field: CellPhone) -> List[Pair]:
        area = self.rng.randrange(100, 999)
        middle = self.rng.randrange(100, 999)
        end = self.rng.randrange(1000, 9999)
        return [(field.name, f"({area}) {middle}-{end}")]

    def _generate_choose_any(self, field: ChooseAny) -> List[Pair]:
        if not field.options:
            return []
        return [self.rng.choice(field.options)]

    def _generate_choose_n(self, field: ChooseN) -> List[Pair]:
        if field.n > len(field.pairs):
            raise GenerationError(
                f"choose_n asks for {field.n} of {len(field.pairs)} pairs")
        return self.rng.sample(field.pairs, field.n)

    def _generate_date(self, field: Date) -> List[Pair]:
        if field.min_year > field.max_year:
            raise GenerationError(
                f"Field '{field.name}' has empty year range {field.min_year}..{field.max_year}")
        year = self.rng.randint(field.min_year, field.max_year)
        month = self.rng.randint(1, 12)
        day = self.rng.randint(1, days_in_month(year, month))
        return [(field.name, f"{month:02d}/{day:02d}/{year:04d}")]

    def _generate_checkboxes(self, field: CheckBoxes) -> List[Pair]:
        return [pair for pair in field.pairs if self.rng.random() < 0.5]

    def _generate_string(self, field: StringField) -> List[Pair]:
        return [(field.name, self._random_token(STRING_CHARS, field.max_len, field.name))]

    def _generate_optional_string(self, field: OptionalString) -> List[Pair]:
        if self.rng.random() < 0.5:
            return [(field.name, "")]
        return []

    def _generate_static(self, field: Static) -> List[Pair]:
        return [(field.name, field.value)]

    def _generate_name(self, field: Name) -> List[Pair]:
        first = self._random_token(NAME_CHARS, field.max_len, field.name)
        last = self._random_token(NAME_CHARS, field.max_len, field.name)
        return [(field.name, f"{first} {last}")]

    def _random_token(self, alphabet: str, max_len: int, field_name: str) -> str:
        if max_len < 1:
            raise GenerationError(f"Field '{field_name}' has max length {max_len}")
        return self.strings.rstr(alphabet, 1, max_len)

