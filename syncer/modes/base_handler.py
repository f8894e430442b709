"""Base mode handler with template method pattern."""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from colorama import Fore, Style


class ModeHandler(ABC):
    """Abstract base class for all subcommand handlers."""

    def __init__(self, app, args):
        """Initialize mode handler.

        Args:
            app: Main :class:`~syncer.cli.Syncer` instance holding the config
            args: Parsed argparse namespace for the subcommand
        """
        self.app = app
        self.config = app.config
        self.args = args

    def execute(self) -> int:
        """Execute mode workflow (Template Method).

        Fatal conditions raise :class:`~syncer.exceptions.SyncError`
        and are turned into exit codes by the CLI.

        Returns:
            Exit code (0 for success, 1 for failure)
        """
        self.display_banner()

        if not self.validate_prerequisites():
            return 1

        context = self.prepare_context()
        if context is None:
            return 1

        result = self.execute_workflow(context)

        if result is not None:
            self.display_completion(result)

        return 0 if result is not None else 1

    @abstractmethod
    def display_banner(self):
        """Display mode-specific banner."""
        pass

    @abstractmethod
    def validate_prerequisites(self) -> bool:
        """Validate prerequisites for this mode.

        Returns:
            True if prerequisites are met, False otherwise
        """
        pass

    @abstractmethod
    def prepare_context(self) -> Optional[Dict[str, Any]]:
        """Resolve locations and anything else the workflow needs.

        Returns:
            Context dictionary with required data, or None if preparation failed
        """
        pass

    @abstractmethod
    def execute_workflow(self, context: Dict[str, Any]) -> Any:
        """Execute mode-specific workflow.

        Args:
            context: Prepared context dictionary

        Returns:
            Result object (mode-specific), or None if failed
        """
        pass

    def display_completion(self, result: Any):
        """Display completion message. Override for custom display."""
        print(f"\n{Fore.GREEN}[SUCCESS] Done{Style.RESET_ALL}\n")
