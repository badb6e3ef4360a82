"""
Tests for the built-in RBAC, ABAC and ReBAC policies.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

import pytest

from gatehouse import (
    AbacPolicy,
    RbacPolicy,
    RebacPolicy,
    RelationshipResolver,
    SecurityRuleMetadata,
    TimeoutRelationshipResolver,
)


@dataclass
class User:
    id: str
    roles: List[str] = field(default_factory=list)
    department: str = ""


@dataclass
class Document:
    id: str
    owner_id: str = ""
    department: str = ""


class StaticResolver(RelationshipResolver):
    """Resolves relationships from a fixed set of (subject, resource, label) tuples."""

    def __init__(self, relationships):
        self.relationships = set(relationships)
        self.calls = []

    async def has_relationship(self, subject, resource, relationship):
        self.calls.append((subject.id, resource.id, relationship))
        return (subject.id, resource.id, relationship) in self.relationships


class SlowResolver(RelationshipResolver):
    async def has_relationship(self, subject, resource, relationship):
        await asyncio.sleep(5)
        return True


class BrokenResolver(RelationshipResolver):
    async def has_relationship(self, subject, resource, relationship):
        raise ConnectionError("relationship store unavailable")


def required_roles(resource, action):
    return {"A", "B"}


class TestRbacPolicy:
    """Role intersection semantics."""

    @pytest.mark.asyncio
    async def test_granted_when_roles_intersect(self):
        policy = RbacPolicy(required_roles, lambda user: set(user.roles))
        result = await policy.evaluate_access(User("u1", ["A"]), "edit", Document("d1"), None)

        assert result.outcome is True
        assert result.policy_name == "RbacPolicy"
        assert result.reason == "User has required role"

    @pytest.mark.asyncio
    async def test_denied_without_common_role(self):
        policy = RbacPolicy(required_roles, lambda user: set(user.roles))
        result = await policy.evaluate_access(User("u1", ["C"]), "edit", Document("d1"), None)

        assert result.outcome is False
        assert result.reason == "User doesn't have required role"

    @pytest.mark.asyncio
    async def test_no_required_roles_denies(self):
        policy = RbacPolicy(lambda resource, action: [], lambda user: user.roles)
        result = await policy.evaluate_access(User("u1", ["A"]), "edit", Document("d1"), None)

        assert result.outcome is False

    @pytest.mark.asyncio
    async def test_resolver_receives_resource_and_action(self):
        seen = []

        def resolve(resource, action):
            seen.append((resource.id, action))
            return ["editor"]

        policy = RbacPolicy(resolve, lambda user: user.roles)
        await policy.evaluate_access(User("u1", ["editor"]), "publish", Document("d7"), None)

        assert seen == [("d7", "publish")]

    @pytest.mark.asyncio
    async def test_async_role_resolver(self):
        async def subject_roles(user):
            return user.roles

        policy = RbacPolicy(required_roles, subject_roles, name="DocumentRoles")
        result = await policy.evaluate_access(User("u1", ["B"]), "edit", Document("d1"), None)

        assert result.outcome is True
        assert result.format() == "✓ DocumentRoles GRANTED: User has required role"


class TestAbacPolicy:
    """Predicate over all four inputs."""

    @pytest.mark.asyncio
    async def test_condition_true(self):
        policy = AbacPolicy(lambda user, doc, action, ctx: user.id == doc.owner_id)
        result = await policy.evaluate_access(User("u1"), "edit", Document("d1", owner_id="u1"), None)

        assert result.outcome is True
        assert result.reason == "Condition evaluated to true"

    @pytest.mark.asyncio
    async def test_condition_false(self):
        policy = AbacPolicy(lambda user, doc, action, ctx: user.id == doc.owner_id)
        result = await policy.evaluate_access(User("u2"), "edit", Document("d1", owner_id="u1"), None)

        assert result.outcome is False
        assert result.format() == "✗ AbacPolicy DENIED: Condition evaluated to false"

    @pytest.mark.asyncio
    async def test_argument_order(self):
        seen = []
        policy = AbacPolicy(lambda *args: seen.append(args) or True)
        await policy.evaluate_access("subject", "action", "resource", "context")

        assert seen == [("subject", "resource", "action", "context")]

    @pytest.mark.asyncio
    async def test_context_sensitive(self):
        policy = AbacPolicy(lambda user, doc, action, ctx: ctx["business_hours"])
        user, doc = User("u1"), Document("d1")

        assert (await policy.evaluate_access(user, "read", doc, {"business_hours": True})).outcome
        assert not (await policy.evaluate_access(user, "read", doc, {"business_hours": False})).outcome

    @pytest.mark.asyncio
    async def test_async_condition(self):
        async def same_department(user, doc, action, ctx):
            return user.department == doc.department

        policy = AbacPolicy(same_department)
        result = await policy.evaluate_access(
            User("u1", department="legal"), "read", Document("d1", department="legal"), None
        )
        assert result.outcome is True

    def test_metadata(self):
        metadata = SecurityRuleMetadata(name="owner-only", category="ownership")
        policy = AbacPolicy(lambda *args: True, metadata=metadata)

        assert policy.security_metadata() is metadata


class TestRebacPolicy:
    """Relationship delegation to the resolver."""

    @pytest.mark.asyncio
    async def test_granted_when_relationship_exists(self):
        resolver = StaticResolver({("u1", "d1", "owner")})
        policy = RebacPolicy("owner", resolver)
        result = await policy.evaluate_access(User("u1"), "edit", Document("d1"), None)

        assert result.outcome is True
        assert "owner" in result.reason
        assert result.reason == "Subject has 'owner' relationship with resource"
        assert resolver.calls == [("u1", "d1", "owner")]

    @pytest.mark.asyncio
    async def test_denied_when_relationship_missing(self):
        resolver = StaticResolver({("u1", "d1", "viewer")})
        policy = RebacPolicy("owner", resolver)
        result = await policy.evaluate_access(User("u1"), "edit", Document("d1"), None)

        assert result.outcome is False
        assert result.format() == (
            "✗ RebacPolicy DENIED: Subject does not have 'owner' relationship with resource"
        )

    def test_default_metadata_is_empty(self):
        policy = RebacPolicy("owner", StaticResolver(()))
        assert policy.security_metadata() == SecurityRuleMetadata()


class TestTimeoutRelationshipResolver:
    """Fail-closed wrapper for slow or failing resolvers."""

    @pytest.mark.asyncio
    async def test_passes_through_answer(self):
        resolver = TimeoutRelationshipResolver(StaticResolver({("u1", "d1", "owner")}), timedelta(seconds=1))

        assert await resolver.has_relationship(User("u1"), Document("d1"), "owner") is True
        assert await resolver.has_relationship(User("u2"), Document("d1"), "owner") is False

    @pytest.mark.asyncio
    async def test_timeout_reads_as_false(self):
        resolver = TimeoutRelationshipResolver(SlowResolver(), 0.01)
        policy = RebacPolicy("owner", resolver)
        result = await policy.evaluate_access(User("u1"), "edit", Document("d1"), None)

        assert result.outcome is False

    @pytest.mark.asyncio
    async def test_resolver_error_reads_as_false(self, caplog):
        resolver = TimeoutRelationshipResolver(BrokenResolver(), 1.0)

        assert await resolver.has_relationship(User("u1"), Document("d1"), "owner") is False
        assert "relationship store unavailable" in caplog.text

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            TimeoutRelationshipResolver(StaticResolver(()), 0)
