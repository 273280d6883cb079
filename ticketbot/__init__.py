"""ticketbot: slash commands for a Discord support-ticket bot."""

__version__ = "1.0.0"
