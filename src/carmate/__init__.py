"""CarMate backend: service-center search and service reminders."""

__version__ = "0.1.0"
