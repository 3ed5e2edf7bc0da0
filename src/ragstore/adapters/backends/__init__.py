from .in_memory import InMemoryIndex
from .jsonl import JsonlIndex
from .readiness import wait_until_ready

__all__ = ["InMemoryIndex", "JsonlIndex", "wait_until_ready"]
