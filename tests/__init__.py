"""
jsondb Test Suite.

This package contains:
- unit/: Unit tests (paths, codec, collection store, database, settings)
- integration/: Integration tests (shell and entry point against real directories)
"""
