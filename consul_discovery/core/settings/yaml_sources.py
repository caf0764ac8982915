"""YAML settings files: ``conf/<name>.yaml`` overlaid by ``conf/<name>.d/*.yaml``.

Drop-in files merge in file name order, so ``10-base.yaml`` is overridden by
``20-prod.yaml``. The ``conf`` directory is replaced by ``<PREFIX>CONFIG_DIR``
(``CONSUL_CONFIG_DIR``, ``APP_CONFIG_DIR``, ``LOGGING_CONFIG_DIR``).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings.sources.providers.yaml import YamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings


def collect_yaml_files(config_dir: Path, name: str) -> list[Path]:
    """Return ``<name>.yaml`` then the sorted ``<name>.d`` files that exist."""
    files = [config_dir / f"{name}.yaml"]
    drop_in = config_dir / f"{name}.d"
    if drop_in.is_dir():
        files += sorted(drop_in.glob("*.yaml")) + sorted(drop_in.glob("*.yml"))
    return [f for f in files if f.is_file()]


class ConfDYamlConfigSettingsSource(YamlConfigSettingsSource):
    """YAML source reading a base file plus its conf.d drop-ins."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        name: str,
        config_dir_env: str,
        default_dir: str = "conf",
    ) -> None:
        self._yaml_files = collect_yaml_files(Path(os.getenv(config_dir_env, default_dir)), name)
        super().__init__(
            settings_cls=settings_cls,
            yaml_file=self._yaml_files or None,
            yaml_file_encoding="utf-8",
        )

    @property
    def yaml_files(self) -> list[Path]:
        """Files loaded, in merge order."""
        return list(self._yaml_files)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(yaml_files={[str(f) for f in self._yaml_files]})"


def create_app_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    return ConfDYamlConfigSettingsSource(settings_cls, "app", "APP_CONFIG_DIR")


def create_logging_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    return ConfDYamlConfigSettingsSource(settings_cls, "logging", "LOGGING_CONFIG_DIR")


def create_consul_yaml_source(settings_cls: type[BaseSettings]) -> ConfDYamlConfigSettingsSource:
    return ConfDYamlConfigSettingsSource(settings_cls, "consul", "CONSUL_CONFIG_DIR")
