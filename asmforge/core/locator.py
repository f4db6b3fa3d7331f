"""Artifact Locator — resolves the game install that holds the source assemblies.

Resolution order:
    1. An explicit ``--source-dir`` override (must exist).
    2. Configured ``search_roots`` (game roots), then
       ``steamapps/common/<game_dir_name>`` under each well-known Steam
       library for the current platform.  First existing wins.

Whichever root wins must contain the managed assembly subdirectory;
every artifact depends on it, so its absence is fatal.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from asmforge.errors import MissingManagedDirError, SourceNotFoundError
from asmforge.models.artifacts import ResolvedSourceRoot

logger = logging.getLogger(__name__)


def default_steam_libraries() -> list[Path]:
    """Well-known Steam library roots for the running platform."""
    home = Path.home()
    if sys.platform == "win32":
        libraries = [
            Path(os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")) / "Steam",
            Path(os.environ.get("ProgramFiles", r"C:\Program Files")) / "Steam",
            Path(r"D:\SteamLibrary"),
            Path(r"E:\SteamLibrary"),
        ]
    elif sys.platform == "darwin":
        libraries = [home / "Library" / "Application Support" / "Steam"]
    else:
        libraries = [
            home / ".steam" / "steam",
            home / ".local" / "share" / "Steam",
            home / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
        ]
    return libraries


class ArtifactLocator:
    """Finds the source root for the configured game.

    Parameters
    ----------
    game_dir_name:
        Directory name of the game under ``steamapps/common``.
    managed_subdir:
        Path, relative to the game root, of the managed assemblies.
    search_roots:
        Extra game install roots probed, in order, before the Steam
        libraries.
    steam_libraries:
        Overrides the platform default Steam libraries (used by tests).
    """

    def __init__(
        self,
        game_dir_name: str,
        managed_subdir: Path,
        *,
        search_roots: list[Path] | None = None,
        steam_libraries: list[Path] | None = None,
    ) -> None:
        self._game_dir_name = game_dir_name
        self._managed_subdir = Path(managed_subdir)
        self._search_roots = [Path(p) for p in (search_roots or [])]
        self._steam_libraries = (
            [Path(p) for p in steam_libraries]
            if steam_libraries is not None
            else default_steam_libraries()
        )

    def candidates(self) -> list[Path]:
        """Ordered list of install locations that will be probed."""
        paths: list[Path] = []
        for root in self._search_roots:
            paths.append(root)
        for library in self._steam_libraries:
            paths.append(library / "steamapps" / "common" / self._game_dir_name)
        return paths

    def locate(self, explicit_path: Path | None = None) -> ResolvedSourceRoot:
        """Resolve the source root, or raise ``SourceNotFoundError``."""
        if explicit_path is not None:
            root = Path(explicit_path).expanduser()
            if not root.is_dir():
                raise SourceNotFoundError(
                    f"Source directory does not exist: {root}"
                )
            logger.info("Using explicit source directory %s", root)
        else:
            root = self._probe()

        managed_dir = root / self._managed_subdir
        if not managed_dir.is_dir():
            raise MissingManagedDirError(
                f"Required directory {self._managed_subdir} not found under {root}"
            )
        return ResolvedSourceRoot(root=root, managed_dir=managed_dir)

    def _probe(self) -> Path:
        candidates = self.candidates()
        for candidate in candidates:
            if candidate.is_dir():
                logger.info("Found %s install at %s", self._game_dir_name, candidate)
                return candidate
            logger.debug("Not found: %s", candidate)
        searched = "\n".join(f"  - {c}" for c in candidates) or "  (no candidates)"
        raise SourceNotFoundError(
            f"Could not locate {self._game_dir_name}. Searched:\n{searched}\n"
            "Pass --source-dir to point at the install explicitly."
        )
