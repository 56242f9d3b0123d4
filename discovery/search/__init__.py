"""
Discovery search core.

Responsibilities:
- Compute great-circle distances and human-readable distance and travel labels.
- Score free-text relevance of venues and items.
- Apply structured facet filters with kind-aware semantics.
- Orchestrate retrieval, filtering, scoring, sorting and pagination.
- Produce ranked autocomplete suggestions.
"""
