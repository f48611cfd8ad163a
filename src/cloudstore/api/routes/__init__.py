from . import classes, system

__all__ = ["classes", "system"]
