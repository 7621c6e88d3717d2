from .events import UIEvent, make_event
from .reporters import Reporter, NullReporter, PlainConsoleReporter, RichConsoleReporter, create_reporter

__all__ = [
    "UIEvent",
    "make_event",
    "Reporter",
    "NullReporter",
    "PlainConsoleReporter",
    "RichConsoleReporter",
    "create_reporter",
]
