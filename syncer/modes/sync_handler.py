"""Handler for the 'sync' subcommand.

Usage:
    syncer sync <SOURCE> <DESTINATION> [--noop] [--recursive] [--delete] [--one-time]
"""
from colorama import Fore, Style

from ..exceptions import ConfigurationError
from ..services.locations import LocationKind
from ..services.reconcile import ReconcileEngine
from ..services.watcher import ChangeWatcher
from ..utils.location_parser import is_interactive, resolve_pair
from ..utils.logger import get_logger
from .base_handler import ModeHandler

log = get_logger(__name__)


class SyncHandler(ModeHandler):
    """Handles ``syncer sync``: reconcile once, then replicate changes."""

    # ── Template-method steps ──────────────────────────────────────────

    def display_banner(self):
        print(f"\n{Fore.CYAN}  ▸ Sync {self.args.source} → {self.args.destination}{Style.RESET_ALL}\n")
        if self.config.noop:
            log.warning("!!! Running in no-op mode.")

    def validate_prerequisites(self) -> bool:
        if not self.args.assume_yes and not is_interactive():
            raise ConfigurationError(
                "Refusing to run non-interactively without --assume-yes"
            )
        return True

    def prepare_context(self) -> dict:
        source, destination = resolve_pair(
            self.args.source, self.args.destination, self.config, self.app.s3_client_factory
        )
        if not self.config.one_time and source.kind is not LocationKind.FILESYSTEM:
            raise ConfigurationError(
                f"Continuous sync needs a local source directory, got {source}; use --one-time"
            )
        return {'source': source, 'destination': destination}

    def execute_workflow(self, context: dict):
        source = context['source']
        destination = context['destination']

        source.build_manifest()
        destination.build_manifest()
        source.list_manifest()
        destination.list_manifest()

        report = ReconcileEngine(source, destination, self.config).run()
        self._print_report(report)

        if self.config.one_time:
            return report

        watcher = ChangeWatcher(source, self.config, self.app.subscription_factory())
        self.app.watcher = watcher
        watcher.run()
        return report

    # ── Display helpers ────────────────────────────────────────────────

    @staticmethod
    def _print_report(report):
        print(f"\n{Fore.CYAN}Reconcile summary:{Style.RESET_ALL}")
        print(f"  Put       : {report.put}")
        print(f"  Deleted   : {report.deleted}")
        print(f"  Unchanged : {report.unchanged}")

    def display_completion(self, result):
        print(f"\n{Fore.GREEN}[SUCCESS] Sync complete{Style.RESET_ALL}\n")
