"""Sheet cut optimizer: packs rectangular pieces onto stock sheets."""

__version__ = "0.1.0"
