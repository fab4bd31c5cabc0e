"""kingside: chess rules, a built-in alpha-beta search and a UCI engine adapter."""

__version__ = "0.1.0"
