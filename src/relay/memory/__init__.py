"""
Conversation memory for Relay.

Memory is optional and lives outside the execution loop's control logic:
run_chain() loads its variables into the inputs and saves each finished
exchange.
"""

from relay.memory.base import Memory
from relay.memory.buffer import ConversationBufferMemory, Exchange

__all__ = [
    "ConversationBufferMemory",
    "Exchange",
    "Memory",
]
