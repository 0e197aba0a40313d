"""activity/ -- Append-only audit log of identity events.

Layer rule: activity/ imports only stdlib, third-party libraries and core/.
auth/ and api/ import from activity/, not the other way around.
"""
