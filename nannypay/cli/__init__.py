"""Nanny Pay command line interface."""
