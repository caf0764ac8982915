"""Tests for lifespan hook ordering."""

from __future__ import annotations

import pytest

from consul_discovery.app.lifespan.registry import LifecycleRegistry


@pytest.fixture
def registry() -> LifecycleRegistry:
    return LifecycleRegistry()


@pytest.mark.asyncio
class TestLifecycleRegistry:
    """Startup/shutdown ordering."""

    async def test_startup_order_and_reverse_shutdown(self, registry):
        calls: list[str] = []

        def track(label: str):
            async def hook(**kwargs) -> None:
                calls.append(label)

            return hook

        registry.register("discovery", startup_order=5, requires=["core"])(track("start discovery"))
        registry.register("core", startup_order=1)(track("start core"))
        registry.on_shutdown("discovery")(track("stop discovery"))
        registry.on_shutdown("core")(track("stop core"))

        await registry.startup()
        await registry.shutdown()

        assert calls == ["start core", "start discovery", "stop discovery", "stop core"]

    async def test_requirement_beats_order(self, registry):
        calls: list[str] = []

        @registry.register("early", startup_order=1, requires=["late"])
        async def start_early(**kwargs) -> None:
            calls.append("early")

        @registry.register("late", startup_order=9)
        async def start_late(**kwargs) -> None:
            calls.append("late")

        await registry.startup()

        assert calls == ["late", "early"]

    async def test_kwargs_passed_to_hooks(self, registry):
        seen: dict[str, object] = {}

        @registry.register("core")
        async def start_core(consul_settings, **kwargs) -> None:
            seen["settings"] = consul_settings

        await registry.startup(consul_settings="cfg", app_settings=None)

        assert seen == {"settings": "cfg"}

    async def test_failed_startup_raises_and_skips_shutdown(self, registry):
        stopped: list[str] = []

        @registry.register("discovery")
        async def start_discovery(**kwargs) -> None:
            raise RuntimeError("agent down")

        @registry.on_shutdown("discovery")
        async def stop_discovery(**kwargs) -> None:
            stopped.append("discovery")

        with pytest.raises(RuntimeError, match="agent down"):
            await registry.startup()
        await registry.shutdown()

        assert stopped == []

    async def test_shutdown_failure_does_not_stop_others(self, registry):
        stopped: list[str] = []

        @registry.register("core", startup_order=1)
        async def start_core(**kwargs) -> None:
            pass

        @registry.register("discovery", startup_order=5)
        async def start_discovery(**kwargs) -> None:
            pass

        @registry.on_shutdown("discovery")
        async def stop_discovery(**kwargs) -> None:
            raise RuntimeError("boom")

        @registry.on_shutdown("core")
        async def stop_core(**kwargs) -> None:
            stopped.append("core")

        await registry.startup()
        await registry.shutdown()

        assert stopped == ["core"]

    async def test_register_shutdown_replaces_callback(self, registry):
        stopped: list[str] = []

        @registry.register("discovery")
        async def start_discovery(**kwargs) -> None:
            pass

        async def first() -> None:
            stopped.append("first")

        async def second() -> None:
            stopped.append("second")

        registry.register_shutdown("discovery", first)
        registry.register_shutdown("discovery", second)
        await registry.startup()
        await registry.shutdown()
        await registry.shutdown()

        assert stopped == ["second"]

    async def test_duplicate_startup_rejected(self, registry):
        registry.register("core")(self._noop)

        with pytest.raises(ValueError, match="already registered"):
            registry.register("core")(self._noop)

    async def test_missing_requirement_rejected(self, registry):
        registry.register("discovery", requires=["core"])(self._noop)

        with pytest.raises(ValueError, match="requires core"):
            await registry.startup()

    async def test_cycle_rejected(self, registry):
        registry.register("a", requires=["b"])(self._noop)
        registry.register("b", requires=["a"])(self._noop)

        with pytest.raises(ValueError, match="Circular dependency"):
            await registry.startup()

    @staticmethod
    async def _noop(**kwargs) -> None:
        return None
