"""Telegram integration for DAOman."""

from .bot import TelegramBot

__all__ = ["TelegramBot"]
