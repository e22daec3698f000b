"""
Observer (callback) hooks for Relay.

Components:
    - Observer: Base class with on_action / on_finish no-op hooks
    - ObserverGroup: Fans notifications out to several observers
    - LoggingObserver: Structured log events via structlog
    - ConsoleObserver: Live progress lines via Rich
"""

from relay.callbacks.base import Observer, ObserverGroup
from relay.callbacks.console import ConsoleObserver
from relay.callbacks.logging import LoggingObserver

__all__ = [
    "ConsoleObserver",
    "LoggingObserver",
    "Observer",
    "ObserverGroup",
]
