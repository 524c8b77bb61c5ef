from .cache import DurableMedium, FetchFn, ReachabilityProbe

__all__ = ["DurableMedium", "FetchFn", "ReachabilityProbe"]
