"""
Database package for Peechi.

Provides the aiosqlite connection manager with its serialised transaction
primitive, the schema bootstrap and the ``Database`` lifecycle wrapper.
"""
