"""Interactive selection of the template and API key.

Turns terminal input into the three registry keys, the secret and the
overwrite decision. Everything here is presentation: the scaffolding core
never prompts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, Prompt

from woolball_scaffold.errors import NotAProjectRoot, OperationCancelled, UnknownSelection
from woolball_scaffold.scaffolder import registry
from woolball_scaffold.scaffolder.models import (
    Feature,
    ProjectCheck,
    Stack,
    TemplateManifest,
    Variant,
)
from woolball_scaffold.utils import console as default_console
from woolball_scaffold.utils import print_warning

logger = logging.getLogger(__name__)

CANCEL = "Cancel"


class Selector:
    """Prompt the user for each choice the scaffolder needs."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def choose(self, message: str, options: list[str]) -> str:
        """Show a numbered menu and return the chosen option.

        The user may answer with the option's number or its text.
        """
        self.console.print(f"\n[bold]{message}[/bold]")
        for index, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]. {option}")

        numbers = [str(i) for i in range(1, len(options) + 1)]
        answer = Prompt.ask(
            "Choice",
            choices=numbers + options,
            default="1",
            show_choices=False,
            console=self.console,
        )
        if answer in numbers:
            return options[int(answer) - 1]
        return answer

    def select_feature(self) -> Feature | None:
        """Return the chosen feature, or ``None`` if the user picked *Cancel*."""
        options = [f.value for f in registry.features()] + [CANCEL]
        answer = self.choose("What feature do you want to implement?", options)
        if answer == CANCEL:
            return None
        return Feature(answer)

    def select_stack(self, feature: Feature | str) -> Stack:
        options = [s.value for s in registry.stacks(feature)]
        if not options:
            raise UnknownSelection(_text(feature), "", "")
        return Stack(self.choose("Select your technology stack:", options))

    def select_variant(self, feature: Feature | str, stack: Stack | str) -> Variant:
        options = [v.value for v in registry.variants(feature, stack)]
        if not options:
            raise UnknownSelection(_text(feature), _text(stack), "")
        return Variant(self.choose("Select template type:", options))

    def ask_secret(self) -> str:
        """Prompt for the API key with hidden input until a non-blank value is given.

        The accepted value is returned exactly as typed.
        """
        while True:
            secret = Prompt.ask("Enter your API key", password=True, console=self.console)
            if secret.strip():
                return secret
            print_warning("The API key cannot be empty.")

    # ------------------------------------------------------------------
    # Destination policy
    # ------------------------------------------------------------------

    def guard_overwrite(
        self,
        manifest: TemplateManifest,
        root: Path,
        assume_yes: bool = False,
    ) -> None:
        """Ask before writing into an existing destination.

        Raises:
            OperationCancelled: The destination exists and the user declined.
        """
        if not destination_exists(manifest, root) or assume_yes:
            return
        confirmed = Confirm.ask(
            "The directory already exists. Do you want to overwrite?",
            default=False,
            console=self.console,
        )
        if not confirmed:
            raise OperationCancelled("Operation canceled by user.")

    def check_project(self, manifest: TemplateManifest, cwd: Path) -> None:
        """Verify *cwd* suits a template that extends an existing project.

        A missing ``.csproj`` only warns; a missing Next.js project is fatal.

        Raises:
            NotAProjectRoot: The Next.js template was requested outside a
                Next.js project.
        """
        if manifest.project_check is ProjectCheck.DOTNET_PROJECT:
            if not any(cwd.glob("*.csproj")):
                print_warning("\nWarning: No .csproj files found in this directory.")
                self.console.print(
                    "[yellow]This may not be a .NET project root. Proceed with caution.[/yellow]"
                )
        elif manifest.project_check is ProjectCheck.NEXTJS_PROJECT:
            if not (cwd / "next.config.js").exists() and not (cwd / "package.json").exists():
                raise NotAProjectRoot(cwd, "Next.js")


def destination_exists(manifest: TemplateManifest, root: Path) -> bool:
    """Return ``True`` if materializing *manifest* at *root* would overwrite anything.

    A dedicated destination directory counts as existing when the directory
    itself exists. When the destination is the working directory (which
    always exists) only the manifest's own target files are considered.
    """
    if manifest.destination_root == Path("."):
        return any(path.exists() for path in manifest.target_paths(root))
    return root.exists()


def _text(value: object) -> str:
    return getattr(value, "value", str(value))
