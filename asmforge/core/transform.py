"""Transform Invoker — publicize + strip assemblies via an external tool.

The external publicizer is modeled as a ``Transformer`` strategy:

1. **PublicizerTransformer** — runs ``<tool> <input> --strip`` with a
   bounded timeout and locates whatever file the tool produced.
2. **PassThroughTransformer** — null object used when the tool is absent,
   the artifact does not need transforming, or transforms are skipped.
   The verbatim working copy is the output.

``TransformInvoker`` drives one artifact through a strategy inside the
run's working directory.  A failed transform never aborts the run: the
untouched baseline copy is published instead and a warning is logged with
the head of the tool's output.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from asmforge.core.hasher import fingerprint_file
from asmforge.models.artifacts import (
    ArtifactDescriptor,
    TransformOutcome,
    TransformStatus,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

PUBLICIZED_SUFFIX = "-publicized"


class ToolResult(BaseModel):
    """Outcome of a single transformer attempt on a working copy."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    transformed: bool = False
    output_path: Path | None = None
    returncode: int | None = None
    output: str = ""


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


@runtime_checkable
class Transformer(Protocol):
    """Protocol for assembly transform backends.

    Any object with a ``name`` and a ``transform(input_path) -> ToolResult``
    method satisfies this protocol.
    """

    @property
    def name(self) -> str:
        ...

    def transform(self, input_path: Path) -> ToolResult:
        """Transform the working copy at *input_path*.

        Implementations must not raise for tool failures; they report them
        through ``ToolResult.ok``.
        """
        ...


class PassThroughTransformer:
    """Null-object transformer: the working copy is the output."""

    name = "pass-through"

    def transform(self, input_path: Path) -> ToolResult:
        return ToolResult(ok=True, transformed=False, output_path=input_path)


PASS_THROUGH = PassThroughTransformer()


def find_tool_output(input_path: Path, original_digest: str | None = None) -> Path | None:
    """Locate the file the publicizer produced for *input_path*.

    The tool writes either a ``<stem>-publicized<suffix>`` sibling or
    modifies the input in place.  The sibling wins when both exist.  When
    *original_digest* is given, an input whose bytes still match it was not
    rewritten and does not count as output.
    """
    sibling = input_path.with_name(
        f"{input_path.stem}{PUBLICIZED_SUFFIX}{input_path.suffix}"
    )
    if sibling.is_file():
        return sibling
    if not input_path.is_file():
        return None
    if original_digest is not None and fingerprint_file(input_path) == original_digest:
        return None
    return input_path


class PublicizerTransformer:
    """Runs the external publicizer CLI against a working copy.

    Parameters
    ----------
    executable:
        Resolved path (or name) of the publicizer binary.
    args:
        Extra arguments appended after the input path.
    timeout:
        Seconds before the tool is considered hung and killed.
    runner:
        ``subprocess.run``-compatible callable (injected by tests).
    """

    def __init__(
        self,
        executable: str,
        args: list[str] | None = None,
        *,
        timeout: float = 300,
        runner: Runner = subprocess.run,
    ) -> None:
        self._executable = executable
        self._args = list(args) if args is not None else ["--strip"]
        self._timeout = timeout
        self._runner = runner

    @property
    def name(self) -> str:
        return Path(self._executable).name

    def command_for(self, input_path: Path) -> list[str]:
        return [self._executable, str(input_path), *self._args]

    def transform(self, input_path: Path) -> ToolResult:
        command = self.command_for(input_path)
        original_digest = fingerprint_file(input_path)
        logger.debug("Running %s", " ".join(command))
        try:
            proc = self._runner(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                cwd=str(input_path.parent),
            )
        except subprocess.TimeoutExpired as exc:
            partial = _decode(exc.stdout) + _decode(exc.stderr)
            return ToolResult(
                ok=False,
                output=f"timed out after {self._timeout}s\n{partial}".rstrip(),
            )
        except OSError as exc:
            return ToolResult(ok=False, output=f"could not start {self.name}: {exc}")

        output = (proc.stdout or "") + (proc.stderr or "")
        if proc.returncode != 0:
            return ToolResult(ok=False, returncode=proc.returncode, output=output)

        produced = find_tool_output(input_path, original_digest)
        if produced is None:
            return ToolResult(
                ok=False,
                returncode=proc.returncode,
                output=output or "tool reported success but produced no output file",
            )
        return ToolResult(
            ok=True,
            transformed=True,
            output_path=produced,
            returncode=proc.returncode,
            output=output,
        )


def _decode(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def resolve_transformer(
    tool_command: str,
    tool_args: list[str] | None = None,
    *,
    install_command: list[str] | None = None,
    auto_install: bool = True,
    timeout: float = 300,
    install_timeout: float = 600,
    runner: Runner = subprocess.run,
    which: Callable[[str], str | None] = shutil.which,
) -> Transformer:
    """Pick the transform strategy for this run.

    Looks the tool up on PATH; if it is missing and *auto_install* is set,
    runs *install_command* once and looks again.  Falls back to
    ``PASS_THROUGH`` when the tool still cannot be found.
    """
    executable = which(tool_command)
    if executable is None and auto_install and install_command:
        logger.info("%s not found, installing: %s", tool_command, " ".join(install_command))
        try:
            proc = runner(
                install_command,
                capture_output=True,
                text=True,
                timeout=install_timeout,
            )
            if proc.returncode != 0:
                logger.warning(
                    "Installing %s failed (exit=%s): %s",
                    tool_command,
                    proc.returncode,
                    ((proc.stdout or "") + (proc.stderr or "")).strip(),
                )
        except (subprocess.SubprocessError, OSError) as exc:
            logger.warning("Installing %s failed: %s", tool_command, exc)
        executable = which(tool_command)

    if executable is None:
        logger.warning(
            "%s is not available; assemblies will be published untransformed.",
            tool_command,
        )
        return PASS_THROUGH
    return PublicizerTransformer(executable, tool_args, timeout=timeout, runner=runner)


# ---------------------------------------------------------------------------
# Invoker
# ---------------------------------------------------------------------------


class TransformInvoker:
    """Runs artifacts through a transformer and publishes the result.

    Parameters
    ----------
    transformer:
        Strategy used for artifacts that require transformation.
    working_dir:
        Run-scoped scratch directory; the caller owns its lifetime.
    output_dir:
        Published location.  Existing files are overwritten.
    skip_transform:
        Publish every artifact verbatim regardless of the transformer.
    output_lines:
        How many lines of tool output to log when a transform fails.
    """

    def __init__(
        self,
        transformer: Transformer,
        working_dir: Path,
        output_dir: Path,
        *,
        skip_transform: bool = False,
        output_lines: int = 20,
    ) -> None:
        self._transformer = transformer
        self._working_dir = Path(working_dir)
        self._output_dir = Path(output_dir)
        self._skip_transform = skip_transform
        self._output_lines = output_lines

    def strategy_for(self, artifact: ArtifactDescriptor) -> Transformer:
        if self._skip_transform or not artifact.requires_transform:
            return PASS_THROUGH
        return self._transformer

    def transform(self, artifact: ArtifactDescriptor, source_path: Path) -> TransformOutcome:
        """Transform one artifact and copy the chosen file to the output dir."""
        source_path = Path(source_path)
        if not source_path.is_file():
            logger.warning("%s: source not found at %s, skipping", artifact.name, source_path)
            return TransformOutcome(
                name=artifact.name,
                status=TransformStatus.SKIPPED,
                source_path=source_path,
            )

        scratch = self._working_dir / artifact.name
        baseline = scratch / "baseline" / artifact.name
        work = scratch / "work" / artifact.name
        for target in (baseline, work):
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source_path, target)

        strategy = self.strategy_for(artifact)
        result = strategy.transform(work)

        if result.ok and result.output_path is not None:
            chosen = result.output_path
            status = (
                TransformStatus.TRANSFORMED if result.transformed
                else TransformStatus.PASSED_THROUGH
            )
        else:
            chosen = baseline
            status = TransformStatus.FALLBACK
            self._log_failure(artifact, strategy, result)

        self._output_dir.mkdir(parents=True, exist_ok=True)
        published = self._output_dir / artifact.name
        shutil.copyfile(chosen, published)
        logger.info("%s: %s -> %s", artifact.name, status.value, published)

        return TransformOutcome(
            name=artifact.name,
            status=status,
            source_path=source_path,
            published_path=published,
            tool_output=result.output,
        )

    def _log_failure(
        self,
        artifact: ArtifactDescriptor,
        strategy: Transformer,
        result: ToolResult,
    ) -> None:
        logger.warning(
            "%s: %s failed (exit=%s); publishing the untransformed copy.",
            artifact.name,
            strategy.name,
            result.returncode,
        )
        lines = result.output.strip().splitlines()
        for line in lines[: self._output_lines]:
            logger.warning("  %s", line)
        if len(lines) > self._output_lines:
            logger.warning("  ... (%d more lines)", len(lines) - self._output_lines)
