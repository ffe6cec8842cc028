"""
formspam - Form fuzzing load generator

Parses Form Fuzzing Language (FFL) field files and keeps posting randomly
filled forms to a URL with a bounded number of open requests.
"""

from .config import (
    DEFAULT_USER_AGENT,
    CellPhone,
    CheckBoxes,
    ChooseAny,
    ChooseN,
    Date,
    Email,
    EngineConfig,
    FieldSpec,
    Name,
    OptionalString,
    Static,
    StringField,
    Summary,
    YesNo,
)
from .errors import ConfigError, GenerationError, SignalError
from .parser import parse_field, parse_config, load_fields
from .values import ValueGenerator
from .generator import FormGenerator
from .engine import SubmissionEngine
from .writer import ReportWriter, format_summary
from .schema import ProfileValidator, build_engine_config
from .signals import install_interrupt_handler
from .spammer import Spammer, sample_forms


__version__ = '1.0.0'

__all__ = [
    # Main entry point
    'Spammer',
    'sample_forms',

    # Field kinds
    'FieldSpec',
    'Email',
    'YesNo',
    'CellPhone',
    'ChooseAny',
    'ChooseN',
    'Date',
    'CheckBoxes',
    'StringField',
    'OptionalString',
    'Static',
    'Name',

    # Configuration
    'EngineConfig',
    'Summary',
    'DEFAULT_USER_AGENT',
    'ProfileValidator',
    'build_engine_config',

    # Errors
    'ConfigError',
    'GenerationError',
    'SignalError',

    # Components
    'parse_field',
    'parse_config',
    'load_fields',
    'ValueGenerator',
    'FormGenerator',
    'SubmissionEngine',
    'ReportWriter',
    'format_summary',
    'install_interrupt_handler',
]
