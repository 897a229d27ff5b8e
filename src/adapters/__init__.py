"""Adapters binding the core to SQLite, the reply catalog and Telegram."""
