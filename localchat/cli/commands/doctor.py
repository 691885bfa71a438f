import sys
from pathlib import Path
from typing import Optional

import typer

from localchat.adapters.storage_fs import FileSystemArtifactLocator
from localchat.engine.factory import BindingFactory
from localchat.internal.config import RuntimeConfig
from localchat.kernel.errors import BindingUnavailable


def doctor(
    models_dir: Optional[Path] = typer.Option(None, help="Directory watched for model files."),
    binding: Optional[str] = typer.Option(None, help="Model binding to check."),
):
    """
    Check the model directory and the model binding.
    """
    config = RuntimeConfig.from_env(models_dir=models_dir, binding=binding)
    typer.echo("Running localchat doctor checks...\n")
    all_passed = True

    def check(description: str, func):
        nonlocal all_passed
        typer.echo(f"- {description}...", nl=False)
        result, message = func()
        if result:
            typer.echo(f" {typer.style('PASSED', fg=typer.colors.GREEN)}")
            if message:
                typer.echo(f"  {message}")
        else:
            typer.echo(f" {typer.style('FAILED', fg=typer.colors.RED)}")
            typer.echo(f"  Reason: {message}")
            all_passed = False

    typer.echo(typer.style("System Information:", fg=typer.colors.BLUE, bold=True))
    typer.echo(f"  Python Version: {sys.version.split()[0]}")
    typer.echo(f"  Models Dir: {config.models_dir}")
    typer.echo(f"  Extensions: {', '.join(config.recognized_extensions)}")
    typer.echo("")

    def check_model_file():
        artifact = FileSystemArtifactLocator(config.recognized_extensions).locate(config.models_dir)
        if artifact is None:
            return False, f"No model file found in '{config.models_dir}'."
        return True, f"Found {artifact.name}"
    check("Model file", check_model_file)

    def check_binding():
        try:
            constructor = BindingFactory.resolve(config.binding)
        except BindingUnavailable as e:
            return False, str(e)
        return True, f"{config.binding} -> {getattr(constructor, '__qualname__', constructor)}"
    check(f"Model binding '{config.binding}'", check_binding)

    typer.echo("")
    if all_passed:
        typer.echo(typer.style("All checks PASSED!", fg=typer.colors.GREEN, bold=True))
    else:
        typer.echo(typer.style("Some checks FAILED. Please review the output above.", fg=typer.colors.RED, bold=True))
        raise typer.Exit(1)
