from __future__ import annotations

import argparse
import logging
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .context import InstallContext
from .errors import InstallCancelled, InstallerError
from .lib.env import PATHS, Paths
from .lib.hwdetect import detect_gpu
from .lib.manifests import load_packages_manifest, package_groups
from .lib.pkg import AptBackend, PackageBackend, export_selections
from .logging_utils import configure_logging
from .pipeline import planned_steps, run_pipeline
from .preferences import Ask, resolve_preferences
from .prompts import ask_yes_no
from .settings import RunOptions, build_options, load_settings
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    ApplyConfigStep,
    InstallExtrasStep,
    InstallNvidiaStep,
    InstallPackagesStep,
    SetupShellStep,
    SummaryStep,
    UpdateSystemStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        UpdateSystemStep(),
        InstallNvidiaStep(),
        InstallPackagesStep(),
        ApplyConfigStep(),
        InstallExtrasStep(),
        SetupShellStep(),
        SummaryStep(),
    ]


def run(
    options: RunOptions,
    *,
    ask: Ask = ask_yes_no,
    backend: Optional[PackageBackend] = None,
    gpu_probe: Callable[[], Dict[str, Any]] = detect_gpu,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> Dict[str, Any]:
    """Resolve preferences, then run the installer pipeline, persisting state."""

    actual_log_path = configure_logging(str(options.log_path), verbose=options.verbose)

    if options.export_packages:
        logger.info("Exporting installed packages for Debian/Ubuntu...")
        out = export_selections(str(options.home / "package_list_debian.txt"), dry_run=options.dry_run)
        return {"export": out}

    state_path = str(options.state_path)
    state = ensure_defaults(load_state(state_path))
    state["options"] = options.as_dict()
    state["execution"]["log_path_actual"] = actual_log_path

    steps = build_steps()

    try:
        gpu = gpu_probe()
        state["hardware"] = {"gpu": gpu}

        planned = planned_steps(state, steps, start_at=start_at, stop_after=stop_after, force=force)
        prefs = resolve_preferences(
            options,
            has_nvidia=bool(gpu.get("has_nvidia")),
            ask=ask,
            config_pending=ApplyConfigStep.step_id in planned,
        )
        state["preferences"] = prefs.as_dict()

        manifest = load_packages_manifest()
        # Reject unknown extra groups before anything is installed.
        package_groups(manifest, extra=options.extra_packages)

        with tempfile.TemporaryDirectory(prefix="i3_") as workdir:
            ctx = InstallContext(
                options=options,
                prefs=prefs,
                backend=backend or AptBackend(dry_run=options.dry_run),
                manifest=manifest,
                workdir=Path(workdir),
            )
            result = run_pipeline(
                state=state,
                steps=steps,
                ctx=ctx,
                start_at=start_at,
                stop_after=stop_after,
                force=force,
            )
        state = result.state
        state["execution"]["summary"] = {
            "ran_steps": result.ran_steps,
            "skipped_steps": result.skipped_steps,
        }
        return state
    except InstallCancelled:
        logger.info("Installation cancelled.")
        raise
    except (InstallerError, ValueError) as e:
        logger.error("Installer failed: %s", e)
        _record_error(state, e)
        raise
    except Exception as e:
        logger.exception("Installer failed")
        _record_error(state, e)
        raise
    finally:
        save_state(state_path, state)


def _record_error(state: Dict[str, Any], e: Exception) -> None:
    state.setdefault("execution", {}).setdefault("errors", []).append(
        {
            "step": getattr(e, "step_id", None) or (state.get("execution") or {}).get("current_step"),
            "error": str(e),
        }
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="i3-installer", description="Set up an i3 desktop on Debian/Ubuntu.")
    p.add_argument("--only-config", action="store_true", help="Only copy config files (skip packages and external tools)")
    p.add_argument("--export-packages", action="store_true", help="Export the installed package list and exit")
    p.add_argument("--non-interactive", action="store_true", help="Run without any user prompts (use defaults)")
    p.add_argument("--config", default=None, help="YAML settings file")
    p.add_argument("--state", default=None, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=None, help="Path to installer log")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Show command output on the console")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_install_packages)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    return p


def main(argv: Optional[list[str]] = None, *, paths: Paths = PATHS) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    step_ids = [s.step_id for s in build_steps()]
    for flag, value in (("--start-at", args.start_at), ("--stop-after", args.stop_after)):
        if value is not None and value not in step_ids:
            parser.error(f"{flag}: unknown step {value!r} (choose from {', '.join(step_ids)})")

    try:
        options = build_options(
            load_settings(args.config),
            paths,
            only_config=args.only_config,
            export_packages=args.export_packages,
            non_interactive=args.non_interactive,
            dry_run=args.dry_run,
            verbose=args.verbose,
            log_path=args.log,
            state_path=args.state,
        )
    except (OSError, ValueError) as e:
        parser.error(f"--config: {e}")

    try:
        run(
            options,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
        )
    except InstallCancelled as e:
        return e.exit_code
    except InstallerError:
        return 1
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    return 0
