from .app import EXIT_AWAITING_CORRECTIONS, EXIT_FATAL, EXIT_NOT_FOUND, EXIT_SUCCESS, main

__all__ = [
    "main",
    "EXIT_SUCCESS",
    "EXIT_FATAL",
    "EXIT_NOT_FOUND",
    "EXIT_AWAITING_CORRECTIONS",
]
