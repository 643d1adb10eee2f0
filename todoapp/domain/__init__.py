"""Domain types and rules, free of storage and transport concerns."""
