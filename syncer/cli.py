"""
Syncer - Main CLI interface

Mirrors a local directory or S3 prefix onto another one: a one-time
reconcile pass, then continuous replication of source-side changes.
"""
import sys
import argparse
from colorama import init, Fore, Style

from .exceptions import ConfigurationError, SyncError
from .utils.aws.aws_utils import create_s3_client
from .utils.config_loader import ConfigLoader, handle_config_update, COMPARE_MODES, RENAME_POLICIES, ERROR_POLICIES
from .utils.logger import get_logger, setup_logging

# Initialize colorama
init(autoreset=True)

log = get_logger(__name__)

# ── Help-text epilogs for subcommands ──────────────────────────────────────

SYNC_EXAMPLES = """\
Examples:
  syncer sync /srv/photos s3://backups/photos
  syncer sync -r -d /srv/photos s3://backups/photos
  syncer sync --one-time s3://backups/photos /restore/photos
  syncer -y sync -n /srv/photos /mnt/mirror     # dry run, no prompt

Workflow:
  build manifests → reconcile once → watch source for changes
"""

LS_EXAMPLES = """\
Examples:
  syncer ls /srv/photos
  syncer ls s3://backups/photos
"""


class Syncer:
    """Main CLI application state shared with the subcommand handlers.

    Args:
        config: Effective :class:`SyncConfig`
        s3_client_factory: Callable building an S3 client from a config
        subscription_factory: Callable returning a watch subscription,
            or ``None`` for the watchdog default
    """

    def __init__(self, config, s3_client_factory=create_s3_client, subscription_factory=None):
        self.config = config
        self.s3_client_factory = s3_client_factory
        self.subscription_factory = subscription_factory or self._default_subscription
        self.watcher = None

    @staticmethod
    def _default_subscription():
        from .services.watcher import WatchdogSubscription
        return WatchdogSubscription()


# ── Argument Parser ────────────────────────────────────────────────────────

def create_argument_parser():
    """Create and configure the subparser-based argument parser."""
    parser = argparse.ArgumentParser(
        prog='syncer',
        description='Syncer: mirror a local directory or S3 prefix onto another',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global flags (apply to all subcommands)
    parser.add_argument('-y', '--assume-yes', dest='assume_yes', action='store_true',
                        help='Allow running without an interactive terminal')
    parser.add_argument('--quiet', action='store_true', help='Only show warnings and errors')
    parser.add_argument('--config', help='Update config.json with JSON string')
    parser.add_argument('--profile', default=None, help='AWS profile for S3 locations')
    parser.add_argument('--region', default=None, help='AWS region for S3 locations')
    parser.add_argument('--endpoint-url', dest='endpoint_url', default=None,
                        help='Custom S3 endpoint (S3-compatible stores)')

    # Shared parent so --verbose works before and after the subcommand name
    _verbose_parent = argparse.ArgumentParser(add_help=False)
    _verbose_parent.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                                 help='Enable verbose output')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ── sync ───────────────────────────────────────────────────────────
    sync_parser = subparsers.add_parser(
        'sync',
        aliases=['p'],
        parents=[_verbose_parent],
        help='Continuously copy all objects from source to the destination',
        description='Reconcile DESTINATION with SOURCE, then replicate source changes.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=SYNC_EXAMPLES,
    )
    sync_parser.add_argument('source', help='Local directory or s3://bucket/prefix')
    sync_parser.add_argument('destination', help='Local directory or s3://bucket/prefix')
    sync_parser.add_argument('-n', '--noop', action='store_true', default=None,
                             help='Log what would change without writing to the destination')
    sync_parser.add_argument('-r', '--recursive', action='store_true', default=None,
                             help='Watch subdirectories as well as the source root')
    sync_parser.add_argument('-d', '--delete', action='store_true', default=None,
                             help="Delete objects in destination that aren't present in the source")
    sync_parser.add_argument('--one-time', dest='one_time', action='store_true', default=None,
                             help='Only sync one time rather than continuously')
    sync_parser.add_argument('--compare', choices=COMPARE_MODES, default=None,
                             help='Change detection for existing objects (default: size)')
    sync_parser.add_argument('--rename-policy', dest='rename_policy', choices=RENAME_POLICIES,
                             default=None, help='How to treat rename events (default: fail)')
    sync_parser.add_argument('--on-error', dest='on_error', choices=ERROR_POLICIES, default=None,
                             help='Abort reconcile on the first failed key or continue and report')
    sync_parser.add_argument('--retries', type=int, default=None,
                             help='Extra attempts for each failed put/delete (default: 0)')

    # ── ls ─────────────────────────────────────────────────────────────
    ls_parser = subparsers.add_parser(
        'ls',
        parents=[_verbose_parent],
        help='List the objects of one location',
        description='Build and print the manifest of a location.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=LS_EXAMPLES,
    )
    ls_parser.add_argument('location', help='Local directory or s3://bucket/prefix')

    return parser


def _config_overrides(args):
    """Collect config values given on the command line."""
    return {
        'noop': getattr(args, 'noop', None),
        'recursive': getattr(args, 'recursive', None),
        'delete': getattr(args, 'delete', None),
        'one_time': getattr(args, 'one_time', None),
        'compare': getattr(args, 'compare', None),
        'rename_policy': getattr(args, 'rename_policy', None),
        'on_error': getattr(args, 'on_error', None),
        'retries': getattr(args, 'retries', None),
        'aws_profile': args.profile,
        'aws_region': args.region,
        'endpoint_url': args.endpoint_url,
    }


def main(argv=None, s3_client_factory=create_s3_client, subscription_factory=None):
    """Main CLI entry point.

    Returns:
        Exit code: 0 on success, 1 on a sync failure, 2 on a configuration
        error, 130 when interrupted
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    # Handle --config (no locations needed)
    if args.config:
        return handle_config_update(args.config)

    if args.command is None:
        parser.print_help()
        return 1

    from .modes.sync_handler import SyncHandler
    from .modes.list_handler import ListHandler

    handlers = {
        'sync': SyncHandler,
        'p': SyncHandler,
        'ls': ListHandler,
    }

    try:
        config = ConfigLoader.load_sync_config(**_config_overrides(args))
        app = Syncer(config, s3_client_factory, subscription_factory)
        return handlers[args.command](app, args).execute()
    except ConfigurationError as e:
        print(f"{Fore.RED}[ERROR] {e}{Style.RESET_ALL}", file=sys.stderr)
        return 2
    except SyncError as e:
        log.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}[INFO] Interrupted{Style.RESET_ALL}")
        return 130


if __name__ == '__main__':
    sys.exit(main())
