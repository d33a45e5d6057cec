"""Sister Botina: immunization helper for parents on Telegram."""

__version__ = "0.1.0"
