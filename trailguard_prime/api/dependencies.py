"""
FastAPI Dependencies

Common dependencies for dependency injection.
"""

from typing import Optional

from fastapi import Depends, Header

from trailguard_prime.api.services.runtime import EngineRuntime, get_runtime
from trailguard_prime.core.config_manager import OrderDefaults
from trailguard_prime.core.coordinator import OrderCoordinator


async def get_engine_runtime() -> EngineRuntime:
    """Get the process runtime."""
    return get_runtime()


async def get_coordinator(
    runtime: EngineRuntime = Depends(get_engine_runtime),
) -> OrderCoordinator:
    return runtime.coordinator


async def get_order_defaults(
    runtime: EngineRuntime = Depends(get_engine_runtime),
) -> OrderDefaults:
    return runtime.config.orders


async def get_caller(
    x_caller_id: Optional[str] = Header(default=None, alias="X-Caller-Id"),
) -> Optional[str]:
    """Caller identity from the X-Caller-Id header (None when absent)."""
    return x_caller_id or None
