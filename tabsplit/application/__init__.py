"""Application workflows over the session store.

Workflows return result dataclasses with a ``status`` instead of raising
for user-facing failures.
"""
