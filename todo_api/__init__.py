"""To-do list API: accounts, sessions and ownership-checked resources."""

__version__ = "0.1.0"
