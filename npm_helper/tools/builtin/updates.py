"""
Dependency Update Tools - npm-check-updates operations on a package.json.

Every handler follows the same steps:
1. resolve the manifest path and fail fast if it does not exist
2. build an UpdateOptions record from the operation's fixed flags plus the
   caller's arguments (merge_options)
3. run ncu and summarize the returned mapping in an UpdateReport

The update resolution itself belongs to ncu; these handlers only assemble
options and describe the result.
"""

import logging
from typing import Any, Optional

from npm_helper.clients.ncu import (
    NpmCheckUpdatesRunner,
    UpdateOptions,
    merge_options,
    resolve_package_file,
)
from npm_helper.models.domain import RegisteredTool
from npm_helper.models.packages import UpdateReport
from npm_helper.models.tools import (
    CheckUpdatesArgs,
    FilterUpdatesArgs,
    ManifestArgs,
    ResolveConflictsArgs,
    RunDoctorArgs,
    SetVersionConstraintsArgs,
    UpgradePackagesArgs,
)
from npm_helper.services.shaping import format_update_report

logger = logging.getLogger(__name__)


class UpdateTools:
    """
    Handlers for the six npm-check-updates tools.

    Attributes:
        runner: Runs ncu for a given options record.
        cwd: Directory relative manifest paths are resolved against
            (defaults to the process working directory).
    """

    def __init__(self, runner: NpmCheckUpdatesRunner, cwd: Optional[str] = None) -> None:
        self.runner = runner
        self.cwd = cwd

    async def _run(self, args: ManifestArgs, **fields: Any) -> dict[str, Any]:
        package_file = resolve_package_file(args.package_path, cwd=self.cwd)
        options = merge_options(
            UpdateOptions(package_file=package_file),
            package_manager=args.package_manager,
            **fields,
        )
        return await self.runner.run(options)

    # =========================================================================
    # Reports
    # =========================================================================

    async def check_updates(self, args: CheckUpdatesArgs) -> UpdateReport:
        result = await self._run(
            args,
            filter=args.filter,
            reject=args.reject,
            target=args.target,
            peer=args.peer,
            minimal=args.minimal,
        )
        count = len(result)
        return UpdateReport(
            message=f"Found {count} outdated dependencies."
            if count
            else "All dependencies are up-to-date.",
            data=result,
        )

    async def upgrade_packages(self, args: UpgradePackagesArgs) -> UpdateReport:
        result = await self._run(
            args,
            upgrade=True,
            target=args.upgrade_type,
            peer=args.peer,
            minimal=args.minimal,
        )
        count = len(result)
        return UpdateReport(
            message=f"Upgraded {count} dependencies."
            if count
            else "No dependencies needed upgrading or were upgraded.",
            data=result,
        )

    async def filter_updates(self, args: FilterUpdatesArgs) -> UpdateReport:
        result = await self._run(
            args, filter=args.filter, upgrade=args.upgrade, minimal=args.minimal
        )
        count = len(result)
        if not count:
            message = "No updates found for the filtered dependencies."
        elif args.upgrade:
            message = f"Found {count} filtered dependencies and upgraded them."
        else:
            message = f"Found {count} filtered dependencies with available updates."
        return UpdateReport(message=message, data=result)

    async def resolve_conflicts(self, args: ResolveConflictsArgs) -> UpdateReport:
        """Peer-dependency-aware resolution; peer is always on."""
        result = await self._run(
            args, peer=True, upgrade=args.upgrade, minimal=args.minimal
        )
        count = len(result)
        if not count:
            message = "No conflicts found or resolved based on peer strategy."
        else:
            message = (
                f"Attempted to resolve conflicts for {count} dependencies "
                f"using the 'peer' strategy"
                + (" and applied changes." if args.upgrade else ".")
            )
        return UpdateReport(message=message, data=result)

    async def set_version_constraints(self, args: SetVersionConstraintsArgs) -> UpdateReport:
        result = await self._run(
            args,
            target=args.target,
            remove_range=args.remove_range,
            upgrade=args.upgrade,
            minimal=args.minimal,
        )
        count = len(result)
        if not count:
            message = "No dependencies required changes based on the version constraints."
        else:
            message = f"Applied version constraints to {count} dependencies" + (
                " and updated package.json." if args.upgrade else " (dry run)."
            )
        return UpdateReport(message=message, data=result)

    async def run_doctor(self, args: RunDoctorArgs) -> UpdateReport:
        """
        Upgrade one dependency at a time, keeping those whose tests pass.

        ncu reports each package as true (upgrade kept) or with the reason it
        was reverted; anything other than true counts as breaking.
        """
        result = await self._run(
            args,
            doctor=True,
            upgrade=True,
            doctor_install=args.doctor_install,
            doctor_test=args.doctor_test,
        )
        if not result:
            return UpdateReport(
                message="Doctor mode completed. No breaking upgrades found "
                "or all dependencies are up-to-date.",
                data={},
            )
        working = sum(1 for outcome in result.values() if outcome is True)
        breaking = len(result) - working
        return UpdateReport(
            message=f"Doctor mode completed: {working} working upgrades applied, "
            f"{breaking} breaking upgrades identified.",
            data=result,
        )

    # =========================================================================
    # Registration
    # =========================================================================

    def tools(self) -> list[RegisteredTool]:
        """RegisteredTool entries for these handlers, in advertised order."""
        specs = [
            ("check_updates", "Scan package.json for outdated dependencies",
             CheckUpdatesArgs, self.check_updates),
            ("upgrade_packages", "Upgrade dependencies in package.json",
             UpgradePackagesArgs, self.upgrade_packages),
            ("filter_updates", "Check/upgrade updates for specific packages",
             FilterUpdatesArgs, self.filter_updates),
            ("resolve_conflicts", "Handle dependency conflicts (uses 'peer' strategy)",
             ResolveConflictsArgs, self.resolve_conflicts),
            ("set_version_constraints", "Configure version upgrade rules for dependencies",
             SetVersionConstraintsArgs, self.set_version_constraints),
            ("run_doctor", "Iteratively install upgrades and run tests",
             RunDoctorArgs, self.run_doctor),
        ]
        return [
            RegisteredTool.create(
                name=name,
                description=description,
                arguments_model=model,
                handler=_as_text(handler),
            )
            for name, description, model, handler in specs
        ]


def _as_text(handler):
    """Wrap a report-returning handler so it returns display text."""

    async def render(args: Any) -> str:
        return format_update_report(await handler(args))

    render.__name__ = handler.__name__
    render.__doc__ = handler.__doc__
    return render
