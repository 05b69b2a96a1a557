"""Nanny Pay - household employee hours, mileage, expenses and pay stubs."""

__version__ = "0.3.0"
