"""Allow ``python -m universal_dev_env``."""

from universal_dev_env.cli import main

main()
