"""Allow running ecsdeploy with ``python -m ecsdeploy``."""

from ecsdeploy.cli.main import main

main()
