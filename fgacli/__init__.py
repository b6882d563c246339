"""Library for relationship-based authorization stores: tuples, models, store tests and output."""

__version__ = "0.1.0"

__all__ = [
    "authmodel",
    "compare",
    "config",
    "confirmation",
    "conversion",
    "errors",
    "importer",
    "output",
    "readresult",
    "remotetest",
    "storedata",
    "testresult",
    "tuplefile",
    "tuples",
]