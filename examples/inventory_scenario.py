"""Example scenarios against an in-memory inventory service.

Run with:
    sce run examples/ --steps
    sce run examples/ -s tag:smoke
"""

import asyncio
import random
from typing import Any, Dict

from scenario_engine import Backoff, RetryPolicy, Skip, resource, scenario, setup, step


class InventoryClient:
    """Stand-in for a network client; flaky on purpose."""

    def __init__(self, failure_rate: float = 0.0):
        self.failure_rate = failure_rate
        self.items: Dict[str, int] = {}
        self.closed = False

    async def put(self, sku: str, quantity: int) -> None:
        await asyncio.sleep(0.01)
        if random.random() < self.failure_rate:
            raise ConnectionError("inventory service unavailable")
        self.items[sku] = quantity

    async def get(self, sku: str) -> int:
        await asyncio.sleep(0.01)
        return self.items[sku]

    async def aclose(self) -> None:
        self.closed = True


async def open_client(ctx) -> InventoryClient:
    return InventoryClient()


def seed_items(ctx) -> Any:
    client = ctx.resources["client"]
    ctx.store["skus"] = ["apple", "pear"]

    async def cleanup():
        client.items.clear()

    return cleanup


async def stock_apples(ctx) -> int:
    await ctx.resources["client"].put("apple", 12)
    return 12


async def read_apples(ctx) -> int:
    quantity = await ctx.resources["client"].get("apple")
    if quantity != ctx.previous:
        raise AssertionError(f"expected {ctx.previous}, got {quantity}")
    return quantity


async def flaky_write(ctx) -> str:
    # Fails on the first attempt only
    if ctx.attempt == 1:
        raise ConnectionError("transient failure")
    await ctx.resources["client"].put("pear", 3)
    return f"written on attempt {ctx.attempt}"


def not_supported(ctx) -> None:
    raise Skip("bulk import is not enabled in this environment")


inventory_roundtrip = scenario(
    "inventory roundtrip",
    [
        resource("client", open_client),
        setup("seed", seed_items),
        step("stock apples", stock_apples),
        step("read apples", read_apples),
    ],
    tags=("smoke", "inventory"),
    description="Write a quantity and read it back",
)

inventory_retry = scenario(
    "inventory retry",
    [
        resource("client", open_client),
        step(
            "flaky write",
            flaky_write,
            retry=RetryPolicy(max_attempts=3, backoff=Backoff.EXPONENTIAL, base_delay=0.05),
        ),
    ],
    tags=("inventory",),
)

inventory_bulk = scenario(
    "inventory bulk import",
    [
        resource("client", open_client),
        step("bulk import", not_supported),
    ],
    tags=("inventory", "slow"),
    timeout=5.0,
)

scenarios = [inventory_roundtrip, inventory_retry, inventory_bulk]
