"""DAOman - grounded persona relay bot."""

__version__ = "0.1.0"
