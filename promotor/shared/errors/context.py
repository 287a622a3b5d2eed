"""Context variables for error handling.

Re-exports from shared.context so error bodies carry the request trace ID.
"""

from promotor.shared.context import trace_id_var

__all__ = ["trace_id_var"]
