"""
Network Module

Bounded-time reachability checks for the read-through path.
"""

from .reachability import HttpReachabilityProbe, NetworkMonitor

__all__ = ["HttpReachabilityProbe", "NetworkMonitor"]
