"""
Restaurant search pipeline.

Responsibilities:
- Turn free-text or voice queries into a structured preference object.
- Map preferences onto query parameters for an external search provider.
- Normalise heterogeneous provider records into the canonical Restaurant shape.
- Run the search end to end without ever raising to the caller.
"""
