"""To-do item manager: a serialized, file-backed item store with CLI, REPL and HTTP front ends."""

__version__ = "0.1.0"
