"""
Basic gatehouse usage example.

This example demonstrates the fundamental operations:
- Role-based and relationship-based policies
- Aggregating them in a PermissionChecker
- Reading the decision and its evaluation trace
- Collecting audit events
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from gatehouse import PermissionChecker, RbacPolicy, RebacPolicy, RelationshipResolver
from gatehouse.audit import MemoryAuditLogger


@dataclass
class User:
    id: str
    roles: List[str] = field(default_factory=list)


@dataclass
class Document:
    id: str


class InMemoryRelationships(RelationshipResolver):
    """Relationship store backed by a set of (user, document, relation) tuples."""

    def __init__(self, tuples: Set[Tuple[str, str, str]]):
        self.tuples = tuples

    async def has_relationship(self, subject: User, resource: Document, relationship: str) -> bool:
        return (subject.id, resource.id, relationship) in self.tuples


async def basic_example():
    """Demonstrate basic gatehouse usage"""
    print("Basic gatehouse Example")
    print("=" * 30)

    audit = MemoryAuditLogger()
    checker = PermissionChecker(audit_logger=audit)

    # 1. Admins may do anything
    checker.add_policy(RbacPolicy(
        lambda document, action: {"admin"},
        lambda user: set(user.roles),
        name="AdminRole",
    ))

    # 2. Owners may edit their own documents
    relationships = InMemoryRelationships({("alice", "doc-1", "owner")})
    checker.add_policy(RebacPolicy("owner", relationships, name="DocumentOwner"))
    print(f"✓ Checker configured with {len(checker)} policies")

    alice = User("alice")
    bob = User("bob")
    root = User("root", roles=["admin"])
    document = Document("doc-1")

    for user in (alice, bob, root):
        result = await checker.evaluate_access(user, "edit", document, None)
        print()
        print(f"{user.id} -> edit {document.id}")
        print(result.display_trace())

    events = await audit.get_events(outcome=True)
    print()
    print(f"✓ {len(events)} granting policy evaluations recorded")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(basic_example())
