"""Checkout to Mollie order bridge."""

__version__ = "0.1.0"
