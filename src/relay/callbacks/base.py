"""
Observer interface for executor notifications.

Observers are a side channel: the executor notifies them when it dispatches
an action and when a call finishes (including the synthetic not-finished
finish). They cannot influence control flow; an exception raised by an
observer is logged by the executor and otherwise ignored.
"""

from abc import ABC
from typing import Sequence

from relay.schema import AgentAction, AgentFinish, AgentStep


class Observer(ABC):
    """
    Base class for executor observers.

    Both hooks default to no-ops so subclasses override only what they need.
    Hooks should return quickly; they run on the executor's thread.
    """

    def on_action(self, action: AgentAction) -> None:
        """Called before an action is resolved and dispatched."""

    def on_finish(self, finish: AgentFinish, steps: Sequence[AgentStep]) -> None:
        """Called once when the call ends with a finish or runs out of iterations."""


class ObserverGroup(Observer):
    """Fan notifications out to several observers, in order."""

    def __init__(self, *observers: Observer) -> None:
        self.observers = list(observers)

    def on_action(self, action: AgentAction) -> None:
        for observer in self.observers:
            observer.on_action(action)

    def on_finish(self, finish: AgentFinish, steps: Sequence[AgentStep]) -> None:
        for observer in self.observers:
            observer.on_finish(finish, steps)
