import typer

from localchat.cli.commands import (
    doctor,
    serve,
    status,
)

app = typer.Typer(
    name="localchat",
    help="Chat with a local language model over HTTP.",
    no_args_is_help=True
)

app.command("serve")(serve.serve)
app.command("status")(status.status)
app.command("doctor")(doctor.doctor)

if __name__ == "__main__":
    app()
