"""
Derived costs: aggregation, tag-invalidated caching and invalidation.

Read costs through ``get_cost_services().reader`` and report writes through
``get_cost_services().dispatcher``.
"""
