"""
npm-check-updates Client - runs the external update resolver.

npm-check-updates (ncu) scans a package.json and computes upgrade
recommendations. It is treated as a black box: it receives an options
record and returns a mapping of package name to recommended version, or to
an upgrade-worked flag in doctor mode.

- UpdateOptions is the explicit options record; merge_options() is the
  single place where caller-supplied fields are folded into a base record.
- NpmCheckUpdatesRunner launches ncu as a subprocess with --jsonUpgraded
  and parses its output.
- resolve_package_file() checks the manifest exists before ncu is started.
"""

import asyncio
import dataclasses
import json
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from npm_helper.core.exceptions import ManifestNotFoundError, ResolverError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "npx --yes npm-check-updates"
DEFAULT_MANIFEST = "package.json"
STDERR_TAIL_CHARS = 2000


# =============================================================================
# Options Record
# =============================================================================


@dataclass(frozen=True)
class UpdateOptions:
    """
    Options for one ncu run. None / False means "not set".

    Attributes mirror the ncu flags of the same (camelCased) name.
    """

    package_file: str
    filter: Optional[tuple[str, ...]] = None
    reject: Optional[tuple[str, ...]] = None
    target: Optional[str] = None
    peer: bool = False
    minimal: bool = False
    upgrade: bool = False
    remove_range: bool = False
    doctor: bool = False
    doctor_install: Optional[str] = None
    doctor_test: Optional[str] = None
    package_manager: Optional[str] = None

    def to_cli_args(self) -> list[str]:
        """Render the set fields as ncu command-line flags."""
        args = ["--packageFile", self.package_file, "--jsonUpgraded", "--loglevel", "silent"]
        if self.filter:
            args += ["--filter", ",".join(self.filter)]
        if self.reject:
            args += ["--reject", ",".join(self.reject)]
        if self.target:
            args += ["--target", self.target]
        if self.peer:
            args.append("--peer")
        if self.minimal:
            args.append("--minimal")
        if self.upgrade:
            args.append("--upgrade")
        if self.remove_range:
            args.append("--removeRange")
        if self.doctor:
            args.append("--doctor")
        if self.doctor_install:
            args += ["--doctorInstall", self.doctor_install]
        if self.doctor_test:
            args += ["--doctorTest", self.doctor_test]
        if self.package_manager:
            args += ["--packageManager", self.package_manager]
        return args


def merge_options(base: UpdateOptions, **overrides: Any) -> UpdateOptions:
    """
    Fold caller-supplied fields into base.

    Overrides that are None are ignored, as are False booleans, so a flag set
    by the base record cannot be switched off by an absent or false field.
    Lists are converted to tuples.

    Example:
        >>> merge_options(UpdateOptions("pkg.json", peer=True), minimal=None, target="minor")
        UpdateOptions(package_file='pkg.json', ..., target='minor', peer=True, ...)
    """
    changes: dict[str, Any] = {}
    for name, value in overrides.items():
        if value is None or value is False:
            continue
        if isinstance(value, list):
            value = tuple(value)
        changes[name] = value
    return dataclasses.replace(base, **changes)


# =============================================================================
# Manifest Resolution
# =============================================================================


def resolve_package_file(package_path: Optional[str], cwd: Optional[str] = None) -> str:
    """
    Resolve the manifest path against the working directory.

    Raises:
        ManifestNotFoundError: If no file exists at the resolved path.
    """
    resolved = (Path(cwd or os.getcwd()) / (package_path or DEFAULT_MANIFEST)).resolve()
    if not resolved.is_file():
        raise ManifestNotFoundError(str(resolved))
    return str(resolved)


# =============================================================================
# Runner
# =============================================================================


def parse_resolver_output(stdout: str) -> dict[str, Any]:
    """
    Parse ncu --jsonUpgraded output into a mapping.

    Empty output means nothing to upgrade.
    """
    text = stdout.strip()
    if not text:
        return {}
    start = text.find("{")
    if start < 0:
        raise ResolverError(f"unexpected output: {text[:200]}")
    try:
        data = json.loads(text[start:])
    except json.JSONDecodeError as e:
        raise ResolverError(f"could not parse output: {e}") from e
    if not isinstance(data, dict):
        raise ResolverError(f"expected a JSON object, got {type(data).__name__}")
    return data


class NpmCheckUpdatesRunner:
    """
    Runs npm-check-updates as a subprocess.

    The subprocess runs in the manifest's directory so ncu picks up the
    project's .npmrc and lockfile. If the awaiting task is cancelled the
    process is killed.

    Example:
        >>> runner = NpmCheckUpdatesRunner()
        >>> await runner.run(UpdateOptions(package_file="/app/package.json"))
        {'react': '^18.3.1'}
    """

    def __init__(self, command: Union[str, Sequence[str]] = DEFAULT_COMMAND) -> None:
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValueError("ncu command must not be empty")

    async def run(self, options: UpdateOptions) -> dict[str, Any]:
        """
        Run ncu with options and return its upgrade mapping.

        Raises:
            ResolverError: If ncu cannot be started, exits non-zero or prints
                unparsable output.
        """
        argv = [*self.command, *options.to_cli_args()]
        logger.debug(f"Running ncu: {shlex.join(argv)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(Path(options.package_file).parent),
            )
        except OSError as e:
            logger.error(f"NCU execution error: {e}")
            raise ResolverError(f"could not start {self.command[0]}: {e}") from e

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
            raise

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[-STDERR_TAIL_CHARS:]
            message = detail or f"exited with code {process.returncode}"
            logger.error(f"NCU execution error: {message}")
            raise ResolverError(message, exit_code=process.returncode)

        return parse_resolver_output(stdout.decode(errors="replace"))
