"""Allow ``python -m open_in_explorer``."""

from open_in_explorer.main import cli

cli()
