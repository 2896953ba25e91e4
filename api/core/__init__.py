"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that multiple features use
(DB wiring, settings, logging, the permission client). Keep search-specific
SQL and pipeline logic in the `search/` package.
"""
