from .log import HistoryLog

__all__ = ["HistoryLog"]
