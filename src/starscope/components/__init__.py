"""Ready-made components built on the binding contract."""

from .date_input import date_input, DateInputHandle

__all__ = ["date_input", "DateInputHandle"]
