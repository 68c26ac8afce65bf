"""Allow ``python -m weave_chunker.cli`` execution."""

from weave_chunker.cli.weave import main

main()
