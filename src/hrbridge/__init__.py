"""hrbridge: HR provider to workforce API synchronization adapter."""

__version__ = "0.1.0"
