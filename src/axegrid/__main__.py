"""Allow ``python -m axegrid``."""

from axegrid.cli.app import app

app()
