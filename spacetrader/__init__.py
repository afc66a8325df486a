"""Items, blueprints, factions, accounts, logging and network diagnostics for a space trading simulation."""

__version__ = "0.1.0"