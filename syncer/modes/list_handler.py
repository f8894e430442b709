"""Handler for the 'ls' subcommand.

Usage:
    syncer ls <LOCATION>
"""
from colorama import Fore, Style

from ..services.locations import LocationRole
from ..utils.location_parser import resolve_location
from .base_handler import ModeHandler


def _format_size(num_bytes):
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024


class ListHandler(ModeHandler):
    """Handles ``syncer ls``: print the manifest of one location."""

    def display_banner(self):
        print(f"\n{Fore.CYAN}  ▸ Manifest of {self.args.location}{Style.RESET_ALL}\n")

    def validate_prerequisites(self) -> bool:
        return True

    def prepare_context(self) -> dict:
        location = resolve_location(
            self.args.location, LocationRole.SOURCE, self.config, self.app.s3_client_factory
        )
        return {'location': location}

    def execute_workflow(self, context: dict):
        manifest = context['location'].build_manifest()
        for key in sorted(manifest):
            descriptor = manifest[key]
            modified = descriptor.last_modified.strftime('%Y-%m-%d %H:%M:%S')
            print(f"  {modified}  {descriptor.size:>12}  {key}")
        return manifest

    def display_completion(self, result):
        print(
            f"\n{Fore.GREEN}{len(result)} object(s), "
            f"{_format_size(result.total_size())}{Style.RESET_ALL}\n"
        )
