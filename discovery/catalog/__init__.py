"""
Entity catalog.

Responsibilities:
- Define the read-only EntityStore contract the search core depends on.
- Provide an in-memory store implementation.
- Load and normalise the venue and item catalog from CSV files.
"""
