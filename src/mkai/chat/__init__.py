from .models import ChatMessage, HistoryTurn, HistoryWindow, Role, now_ms

__all__ = [
    "ChatMessage",
    "HistoryTurn",
    "HistoryWindow",
    "Role",
    "now_ms",
]
