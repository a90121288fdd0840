"""Conversation context store for chat-bot integrations."""

__version__ = "0.1.0"
