"""In-process conversation buffer memory."""

import threading
from dataclasses import dataclass
from typing import Any, Mapping

from relay.memory.base import Memory


@dataclass(frozen=True)
class Exchange:
    """One human/AI turn."""

    human: str
    ai: str


class ConversationBufferMemory(Memory):
    """
    Keep the whole transcript and expose it as one string variable.

    The transcript is rendered as "Human: ...\\nAI: ..." lines so it passes
    the executor's string-only input validation.

    Attributes:
        memory_key: Variable name the transcript is exposed under
        input_key: Input to record as the human turn; defaults to the
            single non-memory input
        output_key: Output to record as the AI turn
        max_exchanges: Keep only the most recent N exchanges (None keeps all)
    """

    def __init__(
        self,
        memory_key: str = "history",
        input_key: str | None = None,
        output_key: str = "output",
        human_prefix: str = "Human",
        ai_prefix: str = "AI",
        max_exchanges: int | None = None,
    ) -> None:
        self.memory_key = memory_key
        self.input_key = input_key
        self.output_key = output_key
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix
        self.max_exchanges = max_exchanges
        self._exchanges: list[Exchange] = []
        self._lock = threading.Lock()

    @property
    def exchanges(self) -> list[Exchange]:
        with self._lock:
            return list(self._exchanges)

    def memory_variables(self) -> list[str]:
        return [self.memory_key]

    def load_memory_variables(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        lines = []
        for exchange in self.exchanges:
            lines.append(f"{self.human_prefix}: {exchange.human}")
            lines.append(f"{self.ai_prefix}: {exchange.ai}")
        return {self.memory_key: "\n".join(lines)}

    def save_context(self, inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> None:
        human = str(inputs.get(self._resolve_input_key(inputs), ""))
        ai = str(outputs.get(self.output_key, ""))
        with self._lock:
            self._exchanges.append(Exchange(human=human, ai=ai))
            if self.max_exchanges is not None and len(self._exchanges) > self.max_exchanges:
                self._exchanges = self._exchanges[-self.max_exchanges :]

    def clear(self) -> None:
        with self._lock:
            self._exchanges.clear()

    def check_inputs(self, inputs: Mapping[str, Any]) -> None:
        """
        Raises:
            ValueError: If no input_key is set and the human input is ambiguous
        """
        self._resolve_input_key(inputs)

    def _resolve_input_key(self, inputs: Mapping[str, Any]) -> str:
        if self.input_key is not None:
            return self.input_key
        candidates = [key for key in inputs if key != self.memory_key]
        if len(candidates) != 1:
            msg = f"Cannot pick the human input among {candidates}; set input_key"
            raise ValueError(msg)
        return candidates[0]
