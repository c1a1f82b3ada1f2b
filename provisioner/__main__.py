"""Allow ``python -m provisioner``."""

from provisioner.main import main

main()
