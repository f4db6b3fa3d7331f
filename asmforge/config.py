"""Runtime configuration — env-driven, pyproject-aware.

Centralized settings using pydantic-settings.  Values are read, highest
priority first, from constructor arguments, ``ASMFORGE_*`` environment
variables, a ``.env`` file, and the ``[tool.asmforge]`` table of the
``pyproject.toml`` in the current directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    PyprojectTomlConfigSettingsSource,
    SettingsConfigDict,
)

from asmforge.models.artifacts import DEFAULT_ARTIFACTS, ArtifactDescriptor


class ForgeSettings(BaseSettings):
    """Pipeline settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export ASMFORGE_GAME_DIR_NAME="My Game"
        export ASMFORGE_LOG_LEVEL=DEBUG
        export ASMFORGE_ARTIFACTS='[{"name": "Assembly-CSharp.dll"}]'

    Or via pyproject.toml::

        [tool.asmforge]
        game_dir_name = "My Game"
        managed_subdir = "MyGame_Data/Managed"
        output_dir = "lib"
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ASMFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
        pyproject_toml_table_header=("tool", "asmforge"),
    )

    log_level: str = "INFO"

    # Source discovery
    game_dir_name: str = "Game"
    managed_subdir: Path = Path("Game_Data/Managed")
    search_roots: list[Path] = []  # probed before the built-in Steam libraries

    # Artifacts and outputs
    artifacts: list[ArtifactDescriptor] = list(DEFAULT_ARTIFACTS)
    output_dir: Path = Path("assemblies")
    ledger_path: Path = Path("assemblies/hashes.json")
    lock_path: Path = Path(".asmforge/run.lock")

    # External publicizer
    tool_command: str = "assembly-publicizer"
    tool_args: list[str] = ["--strip"]
    tool_install_command: list[str] = [
        "dotnet", "tool", "install", "--global", "BepInEx.AssemblyPublicizer.Cli",
    ]
    auto_install_tool: bool = True
    tool_timeout_seconds: int = 300
    tool_output_lines: int = 20

    # Version control
    remote_name: str = "origin"
    tag_prefix: str = "assemblies-v"
    git_timeout_seconds: int = 60
    strict_remote_check: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            PyprojectTomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )
