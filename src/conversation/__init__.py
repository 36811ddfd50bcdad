"""Conversation state: turns and the append-only transcript."""
