"""CivitasFix campus facility-damage reporting API."""

__version__ = "0.1.0"
