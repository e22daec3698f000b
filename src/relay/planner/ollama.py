"""
Ollama planner adapter.

This module implements the Planner interface using Ollama as the backend.
Ollama runs local LLMs and provides a simple HTTP API for completions.
The model is prompted in the ReAct format (see relay.planner.react).

Requirements:
    - Ollama must be installed and running (`ollama serve`)
    - A model must be pulled (`ollama pull qwen2.5:0.5b`)

Usage:
    from relay.planner.ollama import OllamaPlanner
    from relay.schema import PlannerConfig

    planner = OllamaPlanner(PlannerConfig(model="qwen2.5:0.5b"), tools=[search])
    executor = Executor(planner)
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx

from relay.cancellation import CancellationToken
from relay.errors import (
    PlannerConnectionError,
    PlannerModelNotFoundError,
    PlannerParseError,
    PlannerTimeoutError,
)
from relay.logging import get_logger
from relay.planner.base import PlanResult, Planner
from relay.planner.react import OBSERVATION_PREFIX, parse_react_output, render_prompt
from relay.schema import AgentStep, PlannerConfig
from relay.tools.base import Tool

logger = get_logger("relay.planner.ollama")


@dataclass
class OllamaConfig:
    """
    Configuration specific to the Ollama adapter.

    This mirrors PlannerConfig with Ollama-specific settings.
    """

    base_url: str = "http://localhost:11434"
    model: str = "qwen2.5:0.5b"
    timeout_seconds: float = 30.0
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    temperature: float = 0.1
    max_tokens: int = 1024

    @classmethod
    def from_planner_config(cls, config: PlannerConfig) -> "OllamaConfig":
        """Create OllamaConfig from generic PlannerConfig."""
        return cls(
            base_url=config.base_url,
            model=config.model,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            retry_delay_seconds=config.retry_delay_seconds,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )


class OllamaPlanner(Planner):
    """
    Planner implementation using Ollama.

    Features:
        - Automatic retry on connection failures and timeouts
        - ReAct prompting with the ledger replayed as a scratchpad
        - Stops generation at "Observation:" so the model cannot invent results

    The HTTP client is created lazily and reused; httpx.Client is safe to
    share between threads, so one planner can serve concurrent executor calls.
    """

    def __init__(
        self,
        config: PlannerConfig | OllamaConfig | None = None,
        tools: Sequence[Tool] = (),
    ):
        """
        Initialize the Ollama planner.

        Args:
            config: Configuration for the planner. If None, uses defaults.
            tools: Tools the planner may ask the executor to call
        """
        if config is None:
            self.config = OllamaConfig()
        elif isinstance(config, OllamaConfig):
            self.config = config
        else:
            self.config = OllamaConfig.from_planner_config(config)

        self._tools = list(tools)
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "OllamaPlanner":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def plan(
        self,
        steps: Sequence[AgentStep],
        inputs: Mapping[str, str],
        cancel_token: CancellationToken,
    ) -> PlanResult:
        """
        Ask the model for the next action or final answer.

        Raises:
            PlannerConnectionError: Cannot connect to Ollama
            PlannerTimeoutError: Request timed out
            PlannerParseError: Cannot parse response
            PlannerModelNotFoundError: Model not available
            ExecutionCancelledError: Cancelled or past the deadline
        """
        prompt = render_prompt(self._tools, steps, inputs)
        messages = [{"role": "user", "content": prompt}]

        response_text = self._call_ollama_with_retries(messages, cancel_token)
        cancel_token.raise_if_cancelled(phase="planning")
        return parse_react_output(response_text, planner="ollama", model=self.config.model)

    def _call_ollama_with_retries(
        self,
        messages: list[dict[str, str]],
        cancel_token: CancellationToken,
    ) -> str:
        """Call Ollama API with retry logic."""
        last_error: Exception | None = None

        for attempt in range(self.config.max_retries + 1):
            cancel_token.raise_if_cancelled(phase="planning")
            try:
                timeout = cancel_token.timeout_for(self.config.timeout_seconds)
                return self._call_ollama(messages, timeout)
            except (PlannerConnectionError, PlannerTimeoutError) as e:
                last_error = e
                logger.warning(
                    "Ollama request failed",
                    attempt=attempt + 1,
                    max_attempts=self.config.max_retries + 1,
                    error=e.message,
                )
                if attempt < self.config.max_retries:
                    cancel_token.wait(self.config.retry_delay_seconds)

        # All retries exhausted; a deadline that cut the last attempt short wins
        cancel_token.raise_if_cancelled(phase="planning")
        if last_error:
            raise last_error
        raise PlannerConnectionError(
            planner="ollama",
            model=self.config.model,
            url=self.config.base_url,
        )

    def _call_ollama(self, messages: list[dict[str, str]], timeout_seconds: float) -> str:
        """Make a single call to Ollama API."""
        client = self._get_client()

        payload = {
            "model": self.config.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
                "stop": [f"\n{OBSERVATION_PREFIX}"],
            },
        }

        try:
            response = client.post("/api/chat", json=payload, timeout=timeout_seconds)
        except httpx.ConnectError as e:
            raise PlannerConnectionError(
                planner="ollama",
                model=self.config.model,
                url=self.config.base_url,
                underlying_error=str(e),
            ) from e
        except httpx.TimeoutException as e:
            raise PlannerTimeoutError(
                planner="ollama",
                model=self.config.model,
                timeout_seconds=timeout_seconds,
            ) from e

        if response.status_code == 404:
            raise PlannerModelNotFoundError(
                planner="ollama",
                model=self.config.model,
                available_models=self._list_models(),
            )

        if response.status_code != 200:
            raise PlannerConnectionError(
                planner="ollama",
                model=self.config.model,
                url=self.config.base_url,
                underlying_error=f"HTTP {response.status_code}: {response.text}",
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise PlannerParseError(
                planner="ollama",
                model=self.config.model,
                raw_response=response.text[:500],
                parse_error=f"Invalid JSON from Ollama: {e}",
            ) from e

        content: str = data.get("message", {}).get("content", "")
        if not content:
            raise PlannerParseError(
                planner="ollama",
                model=self.config.model,
                raw_response=str(data)[:500],
                parse_error="Empty response from model",
            )

        return content

    def _list_models(self) -> list[str]:
        """List available models from Ollama, empty if the listing fails."""
        try:
            response = self._get_client().get("/api/tags")
        except httpx.HTTPError:
            return []
        if response.status_code != 200:
            return []
        return [m["name"] for m in response.json().get("models", [])]

    def get_tools(self) -> list[Tool]:
        return list(self._tools)

    def get_name(self) -> str:
        """Return planner name."""
        return f"OllamaPlanner({self.config.model})"

    def get_config(self) -> dict[str, Any]:
        """Return planner configuration."""
        return {
            "backend": "ollama",
            "base_url": self.config.base_url,
            "model": self.config.model,
            "timeout_seconds": self.config.timeout_seconds,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    def check_connection(self) -> tuple[bool, str]:
        """
        Check if Ollama is accessible and the model is available.

        Returns:
            Tuple of (is_ok, message)
        """
        try:
            response = self._get_client().get("/api/tags")
        except httpx.ConnectError:
            return False, f"Cannot connect to Ollama at {self.config.base_url}. Is it running?"
        except httpx.HTTPError as e:
            return False, f"Error checking Ollama: {e}"

        if response.status_code != 200:
            return False, f"Ollama returned HTTP {response.status_code}"

        models = [m["name"] for m in response.json().get("models", [])]
        if not models:
            return False, f"No models available. Run: ollama pull {self.config.model}"

        # Handle both "model" and "model:tag" formats
        model_base = self.config.model.split(":")[0]
        available = any(
            m == self.config.model or m.startswith(f"{model_base}:") for m in models
        )
        if not available:
            return (
                False,
                f"Model '{self.config.model}' not found. Available: {', '.join(models[:3])}",
            )

        return True, f"Connected to Ollama, model '{self.config.model}' available"
