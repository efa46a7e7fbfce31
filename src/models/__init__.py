from .setting import Setting, wrap_state

__all__ = [
    "Setting",
    "wrap_state",
]
