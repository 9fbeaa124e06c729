"""Request Dependencies — caller identity forwarded by the upstream gateway.

Invariants:
    - Every order route is scoped to X-Customer-Id; writes are attributed to X-User-Id
    - Missing headers fail request validation (400), never reach a service

Design Decisions:
    - Authentication lives in the gateway; this service trusts the forwarded ids
"""

from dataclasses import dataclass

from fastapi import Header


@dataclass(frozen=True)
class Caller:
    customer_id: str
    user_id: str


async def get_caller(
    x_customer_id: str = Header(..., min_length=1, max_length=64),
    x_user_id: str = Header(..., min_length=1, max_length=64),
) -> Caller:
    return Caller(customer_id=x_customer_id, user_id=x_user_id)
