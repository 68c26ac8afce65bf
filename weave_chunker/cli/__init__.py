"""Command-line tools for weave-chunker.

- ``python -m weave_chunker.cli bake`` - index a lore directory
- ``python -m weave_chunker.cli rebake`` - wipe the database and re-index
- ``python -m weave_chunker.cli search`` - query the index (JSON on stdout)
- ``python -m weave_chunker.cli analyze`` - corpus statistics
"""
