"""
Combinator short-circuit example.

Shows that AndPolicy and OrPolicy stop evaluating as soon as their outcome
is known, and how that is reflected in the trace.
"""

import asyncio

from gatehouse import AndPolicy, Denied, Granted, OrPolicy, Policy


class CountingPolicy(Policy):
    """A policy that records when it's evaluated"""

    def __init__(self, name: str, allow: bool, counter: list):
        self.name = name
        self.allow = allow
        self.counter = counter

    def policy_name(self) -> str:
        return f"CountingPolicy({self.name})"

    async def evaluate_access(self, subject, action, resource, context):
        self.counter.append(self.name)
        if self.allow:
            return Granted(self.policy_name(), f"{self.name} grants access")
        return Denied(self.policy_name(), f"{self.name} denies access")


async def main():
    print("=== AND Policy Short-Circuit Example ===")
    counter = []
    and_policy = AndPolicy([
        CountingPolicy("DenyFirst", False, counter),
        CountingPolicy("AllowSecond", True, counter),
    ])
    result = await and_policy.evaluate_access("user", "view", "document", None)
    print(f"Policies evaluated: {len(counter)}")
    print(f"Trace:\n{result.format()}")

    print("\n=== Complex Nested Policy Example ===")
    counter = []
    inner_and = AndPolicy([
        CountingPolicy("DenyInner", False, counter),
        CountingPolicy("AllowInner", True, counter),
    ])
    complex_policy = OrPolicy([inner_and, CountingPolicy("AllowOuter", True, counter)])
    result = await complex_policy.evaluate_access("user", "view", "document", None)
    print(f"Result: {'Access granted' if result.outcome else 'Access denied'}")
    print(f"Policies evaluated: {len(counter)}")
    print(f"Trace:\n{result.format()}")


if __name__ == "__main__":
    asyncio.run(main())
