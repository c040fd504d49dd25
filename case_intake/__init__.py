"""Case roster intake: CSV / Excel roster exports -> validated cases."""

__version__ = "0.1.0"
