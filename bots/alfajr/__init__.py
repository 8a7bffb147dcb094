"""Alfajr: customer records for a tailoring shop, kept through a Telegram bot."""

__version__ = "0.1.0"
