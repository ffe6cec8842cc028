"""Parameter map generation."""

import random
from typing import Dict, Optional, Sequence

from .config import FieldSpec
from .values import ValueGenerator


class FormGenerator:
    """Builds one randomized parameter map per call.

    The engine calls ``generate`` from its event loop thread only, so a
    single ``random.Random`` per generator is enough. Give each thread its
    own generator when using one outside the engine.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random(seed)
        self.value_generator = ValueGenerator(self.rng)

    def generate(self, fields: Sequence[FieldSpec]) -> Dict[str, str]:
        """Generate a fresh parameter map.

        Fields are visited in order; a later field overwrites an earlier
        entry with the same name.
        """
        params: Dict[str, str] = {}
        for field in fields:
            for name, value in self.value_generator.generate(field):
                params[name] = value
        return params
