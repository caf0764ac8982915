"""Ordered startup/shutdown hooks for the application lifespan.

Startup hooks run by ascending ``startup_order`` once everything they
``require`` has run. Shutdown callbacks run in reverse startup order, and only
for hooks whose startup completed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    HookFunc = Callable[..., Awaitable[None]]

logger = logging.getLogger(__name__)


@dataclass
class LifecycleHook:
    """A named startup hook and the shutdown callback attached to it."""

    name: str
    startup: HookFunc
    startup_order: int = 50
    requires: list[str] = field(default_factory=list)
    shutdown: HookFunc | None = None
    started: bool = False


class LifecycleRegistry:
    """Registry of lifespan hooks.

    Implements ``ShutdownHookRegistrar``, so a component created by a startup
    hook can attach its own cleanup with ``register_shutdown``.

    Example:
        registry = LifecycleRegistry()

        @registry.register(name="discovery", startup_order=5, requires=["core"])
        async def startup_discovery(consul_settings: ConsulSettings, **kwargs) -> None:
            lifecycle = await start_discovery(consul_settings)
            if lifecycle is not None:
                lifecycle.deregister_on_shutdown(registry)

        await registry.startup(**all_settings)
        await registry.shutdown(**all_settings)
    """

    def __init__(self) -> None:
        self._hooks: dict[str, LifecycleHook] = {}

    def register(
        self,
        name: str,
        startup_order: int = 50,
        requires: list[str] | None = None,
    ) -> Callable[[HookFunc], HookFunc]:
        """Decorator registering the startup hook ``name``.

        Args:
            name: Unique hook name, also used by ``on_shutdown``.
            startup_order: Lower runs first among hooks whose requirements are met.
            requires: Hook names that must start before this one.

        Raises:
            ValueError: If a startup hook with this name already exists.
        """

        def decorator(func: HookFunc) -> HookFunc:
            existing = self._hooks.get(name)
            if existing is not None and existing.startup is not _unset:
                raise ValueError(f"Startup hook '{name}' already registered")
            self._hooks[name] = LifecycleHook(
                name=name,
                startup=func,
                startup_order=startup_order,
                requires=list(requires or []),
                shutdown=existing.shutdown if existing else None,
            )
            return func

        return decorator

    def on_shutdown(self, name: str) -> Callable[[HookFunc], HookFunc]:
        """Decorator attaching a shutdown function to the hook ``name``.

        The function receives the same keyword arguments as ``shutdown()``.
        """

        def decorator(func: HookFunc) -> HookFunc:
            self._hook_for(name).shutdown = func
            return func

        return decorator

    def register_shutdown(self, name: str, callback: Callable[[], Awaitable[None]]) -> None:
        """Attach a no-argument ``callback`` to the hook ``name``.

        Replaces any shutdown function already attached under that name.
        """

        async def run_callback(**_: Any) -> None:
            await callback()

        self._hook_for(name).shutdown = run_callback

    def _hook_for(self, name: str) -> LifecycleHook:
        hook = self._hooks.get(name)
        if hook is None:
            # Shutdown declared before its startup hook; filled in by register()
            hook = LifecycleHook(name=name, startup=_unset)
            self._hooks[name] = hook
        return hook

    def _startup_sequence(self) -> list[LifecycleHook]:
        """Order startup hooks by requirements, then by ``startup_order``.

        Raises:
            ValueError: On a missing requirement or a dependency cycle.
        """
        hooks = {n: h for n, h in self._hooks.items() if h.startup is not _unset}
        for hook in hooks.values():
            missing = [dep for dep in hook.requires if dep not in hooks]
            if missing:
                raise ValueError(
                    f"Hook '{hook.name}' requires {', '.join(missing)} but it's not registered"
                )

        ordered: list[LifecycleHook] = []
        done: set[str] = set()
        pending = sorted(hooks.values(), key=lambda h: (h.startup_order, h.name))
        while pending:
            ready = next((h for h in pending if all(d in done for d in h.requires)), None)
            if ready is None:
                names = " -> ".join(h.name for h in pending)
                raise ValueError(f"Circular dependency detected among: {names}")
            pending.remove(ready)
            ordered.append(ready)
            done.add(ready.name)
        return ordered

    async def startup(self, **kwargs: Any) -> None:
        """Run startup hooks in order, passing ``kwargs`` to each.

        Raises:
            Exception: The first hook failure, after logging it. Later hooks
                do not run.
        """
        for hook in self._startup_sequence():
            logger.debug("Starting %s...", hook.name)
            try:
                await hook.startup(**kwargs)
            except Exception as e:
                logger.error("Failed to start %s: %s", hook.name, e, exc_info=True)
                raise
            hook.started = True

    async def shutdown(self, **kwargs: Any) -> None:
        """Run shutdown functions of started hooks in reverse startup order.

        Failures are logged and the remaining hooks still run.
        """
        for hook in reversed(self._startup_sequence()):
            if not hook.started:
                continue
            hook.started = False
            if hook.shutdown is None:
                continue
            logger.debug("Shutting down %s...", hook.name)
            try:
                await hook.shutdown(**kwargs)
            except Exception as e:
                logger.warning("Error shutting down %s: %s", hook.name, e, exc_info=True)

    def clear(self) -> None:
        """Remove all hooks (tests)."""
        self._hooks.clear()


async def _unset(**_: Any) -> None:
    """Placeholder startup for a hook that so far only has a shutdown function."""


lifespan_registry = LifecycleRegistry()

__all__ = ["LifecycleHook", "LifecycleRegistry", "lifespan_registry"]
