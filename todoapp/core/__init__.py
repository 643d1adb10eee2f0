"""
Core utilities shared across the to-do API.

This package hosts configuration helpers (env vars, paths) and cross-cutting
concerns such as logging and trace ids. Stores, routers and the command line
entry points depend on these primitives instead of reading os.environ or
configuring handlers themselves.
"""
