from __future__ import annotations

from collections.abc import Callable

from itasset.authz.catalog import validate_permissions


def require_permissions(*permissions: str) -> Callable:
    """
    Decorator-style API (ALTERNATIVE to the YAML route rules).

    Implementation detail:
    - This decorator does NOT perform auth itself.
    - It attaches metadata that the global security dependency reads
      *after* routing (during dependency resolution).
    - Requirements accumulate: stacking decorators requires all of them.
    - Unknown permission strings fail at import time.
    """

    validate_permissions(permissions)

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__security_required_permissions__", set()))
        setattr(fn, "__security_required_permissions__", existing | set(permissions))
        return fn

    return decorator


def public() -> Callable:
    """
    Decorator-style API (ALTERNATIVE EXAMPLE).

    Marks an endpoint as not requiring authentication.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_public__", True)
        return fn

    return decorator
