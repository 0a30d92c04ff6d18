"""Allow ``python -m create_npl``."""

from create_npl.cli import main

main()
