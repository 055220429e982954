"""Core request handling."""

from textappend.core.concurrency import AppendSlot
from textappend.core.handler import AppendReadHandler, HandlerResponse, Outcome

__all__ = ["AppendReadHandler", "AppendSlot", "HandlerResponse", "Outcome"]
