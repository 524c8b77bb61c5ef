"""
Infrastructure Layer

Cache tiers, the durable medium, network reachability and metrics.
"""
