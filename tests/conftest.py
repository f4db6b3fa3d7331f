"""Shared test fixtures for asmforge."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from asmforge.config import ForgeSettings
from asmforge.core.change_ledger import InMemoryLedgerStore, JsonLedgerStore
from asmforge.core.git import GitClient
from asmforge.core.locator import ArtifactLocator
from asmforge.core.transform import ToolResult

ASSEMBLY_MAIN = "Assembly-CSharp.dll"
ASSEMBLY_FIRSTPASS = "Assembly-CSharp-firstpass.dll"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeGitRunner:
    """``subprocess.run`` stand-in that simulates a git checkout.

    Records every git invocation in ``calls`` (without the leading
    ``git``).  Subcommands listed in ``fail`` exit with status 1.
    """

    def __init__(
        self,
        *,
        work_tree: bool = True,
        remotes: tuple[str, ...] = ("origin",),
        remote_tags: tuple[str, ...] = (),
        local_tags: tuple[str, ...] = (),
        staged: bool = True,
        fail: tuple[str, ...] = (),
        missing: bool = False,
    ) -> None:
        self.work_tree = work_tree
        self.remotes = list(remotes)
        self.remote_tags = set(remote_tags)
        self.local_tags = set(local_tags)
        self.staged = staged
        self.fail = set(fail)
        self.missing = missing
        self.calls: list[list[str]] = []

    def subcommands(self) -> list[str]:
        return [c[0] for c in self.calls]

    def calls_for(self, subcommand: str) -> list[list[str]]:
        return [c for c in self.calls if c[0] == subcommand]

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        if self.missing:
            raise FileNotFoundError(2, "No such file or directory", "git")
        assert command[0] == "git"
        args = list(command[1:])
        self.calls.append(args)
        sub = args[0]

        if sub in self.fail:
            return self._done(args, 1, stderr=f"fatal: {sub} failed\n")

        if sub == "rev-parse":
            if "--is-inside-work-tree" in args:
                if self.work_tree:
                    return self._done(args, 0, "true\n")
                return self._done(args, 128, stderr="fatal: not a git repository\n")
            if "--verify" in args:
                tag = args[-1].removeprefix("refs/tags/")
                return self._done(args, 0 if tag in self.local_tags else 1)
            return self._done(args, 0, "0123456789abcdef0123456789abcdef01234567\n")
        if sub == "remote":
            return self._done(args, 0, "".join(f"{r}\n" for r in self.remotes))
        if sub == "ls-remote":
            ref = args[-1]
            tag = ref.removeprefix("refs/tags/")
            if tag in self.remote_tags:
                return self._done(args, 0, f"deadbeef\t{ref}\ncafebabe\t{ref}^{{}}\n")
            return self._done(args, 0, "")
        if sub == "diff":
            return self._done(args, 1 if self.staged else 0)
        if sub == "tag":
            self.local_tags.add(args[2])
            return self._done(args, 0)
        if sub == "push":
            for ref in args[2:]:
                if ref.startswith("refs/tags/"):
                    self.remote_tags.add(ref.removeprefix("refs/tags/"))
            return self._done(args, 0)
        return self._done(args, 0)

    @staticmethod
    def _done(
        args: list[str], returncode: int, stdout: str = "", stderr: str = ""
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(["git", *args], returncode, stdout, stderr)


class FakePublicizer:
    """Transformer that writes a ``-publicized`` sibling with marked bytes."""

    name = "fake-publicizer"

    def __init__(self, *, fail_for: tuple[str, ...] = ()) -> None:
        self.fail_for = set(fail_for)
        self.seen: list[Path] = []

    def transform(self, input_path: Path) -> ToolResult:
        self.seen.append(input_path)
        if input_path.name in self.fail_for:
            # corrupt the working copy to prove the baseline is used
            input_path.write_bytes(b"garbage")
            return ToolResult(ok=False, returncode=3, output="error: bad image\nline 2")
        output = input_path.with_name(f"{input_path.stem}-publicized{input_path.suffix}")
        output.write_bytes(b"PUBLIC:" + input_path.read_bytes())
        return ToolResult(ok=True, transformed=True, output_path=output, returncode=0)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def game_root(tmp_dir: Path) -> Path:
    """A fake game install with two managed assemblies (contents X and Y)."""
    root = tmp_dir / "steam" / "steamapps" / "common" / "Game"
    managed = root / "Game_Data" / "Managed"
    managed.mkdir(parents=True)
    (managed / ASSEMBLY_MAIN).write_bytes(b"X" * 64)
    (managed / ASSEMBLY_FIRSTPASS).write_bytes(b"Y" * 64)
    return root


@pytest.fixture
def settings(tmp_dir: Path) -> ForgeSettings:
    """Settings with every writable path inside the temp directory."""
    return ForgeSettings(
        output_dir=tmp_dir / "repo" / "assemblies",
        ledger_path=tmp_dir / "repo" / "assemblies" / "hashes.json",
        lock_path=tmp_dir / "repo" / ".asmforge" / "run.lock",
        auto_install_tool=False,
        search_roots=[],
    )


@pytest.fixture
def locator(tmp_dir: Path) -> ArtifactLocator:
    """Locator that only probes the temp Steam library."""
    return ArtifactLocator(
        "Game",
        Path("Game_Data/Managed"),
        steam_libraries=[tmp_dir / "steam"],
    )


@pytest.fixture
def json_store(settings: ForgeSettings) -> JsonLedgerStore:
    return JsonLedgerStore(settings.ledger_path)


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def make_git_runner() -> Callable[..., FakeGitRunner]:
    """Factory fixture: build a FakeGitRunner with overrides."""

    def _factory(**overrides: Any) -> FakeGitRunner:
        return FakeGitRunner(**overrides)

    return _factory


@pytest.fixture
def make_git(tmp_dir: Path) -> Callable[[FakeGitRunner], GitClient]:
    """Factory fixture: a GitClient driven by a FakeGitRunner."""

    def _factory(runner: FakeGitRunner, *, dry_run: bool = False) -> GitClient:
        return GitClient(tmp_dir / "repo", runner=runner, dry_run=dry_run)

    return _factory


@pytest.fixture
def publicizer() -> FakePublicizer:
    return FakePublicizer()


@pytest.fixture
def make_publicizer() -> Callable[..., FakePublicizer]:
    """Factory fixture: a FakePublicizer, optionally failing for some names."""

    def _factory(*, fail_for: tuple[str, ...] = ()) -> FakePublicizer:
        return FakePublicizer(fail_for=fail_for)

    return _factory
