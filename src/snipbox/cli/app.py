import typer

from snipbox.cli.db import db_app
from snipbox.cli.serve import serve
from snipbox.cli.snippets import add, delete, search, show

app = typer.Typer(
    name="snipbox",
    help="snipbox CLI: store, search and serve code snippets.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(db_app, name="db")
app.command("serve")(serve)
app.command("add")(add)
app.command("search")(search)
app.command("show")(show)
app.command("delete")(delete)


def main() -> None:
    app()
