"""Boundary Protocols — contracts between core and external collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Uploaded document bytes are never handled here; only references

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO (object storage, document service)
"""

from typing import Protocol

from orderdesk.core.domain_types import OrderId


class DocumentReferenceResolver(Protocol):
    """Contract for the document-storage subsystem — implemented outside this core.

    Returns {requirement_id (str): file_url} for every document uploaded
    against the order.
    """
    async def uploaded_documents(self, order_id: OrderId) -> dict[str, str]: ...
