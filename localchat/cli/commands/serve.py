from pathlib import Path
from typing import Optional

import typer

from localchat.adapters.http.fastapi_server import serve as run_server
from localchat.internal import paths
from localchat.internal.config import RuntimeConfig
from localchat.internal.logging import setup_logging


def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to."),
    port: Optional[int] = typer.Option(None, help="Port to bind the server to."),
    models_dir: Optional[Path] = typer.Option(None, help="Directory watched for model files."),
    data_dir: Optional[Path] = typer.Option(None, help="Directory holding users.json."),
    public_dir: Optional[Path] = typer.Option(None, help="Static assets served at /."),
    binding: Optional[str] = typer.Option(None, help="Model binding: gpt4all, llama_cpp or module:attribute."),
    poll_interval_ms: Optional[int] = typer.Option(None, help="Model directory poll interval in milliseconds."),
    retry_failed_probe: Optional[bool] = typer.Option(
        None, "--retry-failed-probe/--no-retry-failed-probe", help="Keep retrying after a failed model initialization."
    ),
    log_level: Optional[str] = typer.Option(None, help="Log level."),
):
    """
    Serve the chat API. The model is loaded in the background.
    """
    config = RuntimeConfig.from_env(
        host=host,
        port=port,
        models_dir=models_dir,
        data_dir=data_dir,
        public_dir=public_dir,
        binding=binding,
        poll_interval_ms=poll_interval_ms,
        retry_failed_probe=retry_failed_probe,
        log_level=log_level,
    )
    setup_logging(config.log_level, log_file_path=paths.get_log_file(), console_output=True)

    typer.echo(f"localchat listening on http://{config.host}:{config.port}")
    typer.echo(f"Waiting for a model file in {config.models_dir}")
    run_server(config)
