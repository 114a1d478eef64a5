"""
Persistence adapters.

Every domain service keeps its data in an EntityStore; the store delegates
durability to a persistence strategy (memory, JSON file or SQL database)
chosen at construction time.
"""
