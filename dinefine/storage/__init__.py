"""
Persistence layer.

Responsibilities:
- Provide a generic row store (profiles, saved restaurants, tags, feedback).
- Expose per-feature operations keyed by user identity.
"""
