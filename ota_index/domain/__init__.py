"""
Core of the index merger.

This package is responsible for:
* The source data model (server URLs, stored URL and raw JSON sources).
* Source identity, sanitization, legacy migration and precedence ordering.
* Folding resolved source arrays into one deduplicated firmware index.

Nothing in here does I/O.
"""
