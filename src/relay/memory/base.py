"""
Memory interface.

A memory stores named variables for a conversation across separate executor
calls. The executor itself only carries a reference; run_chain loads the
variables into the inputs before a call and saves the exchange afterwards.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class Memory(ABC):
    """Abstract conversation memory."""

    @abstractmethod
    def memory_variables(self) -> list[str]:
        """Names of the variables load_memory_variables() returns."""
        ...

    @abstractmethod
    def load_memory_variables(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        """Return the stored variables relevant to these inputs."""
        ...

    @abstractmethod
    def save_context(self, inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> None:
        """Record one finished exchange."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Forget everything."""
        ...

    def check_inputs(self, inputs: Mapping[str, Any]) -> None:
        """
        Raise if save_context() would reject these inputs.

        run_chain calls this before the executor runs. The default accepts
        everything.
        """
