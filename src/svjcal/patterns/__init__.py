from .observable import Observable, Observer

__all__ = ["Observable", "Observer"]
