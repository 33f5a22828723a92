#!/usr/bin/env python
"""Process entry point for the model provisioner.

There are no arguments: every knob comes from the environment (see
``load_runtime_settings``) and the process runs until it is terminated.
"""

import logging
import sys

from modelprovisioner import __version__
from modelprovisioner.core.config.loader import load_runtime_settings
from modelprovisioner.core.utils.logging import configure_logging
from modelprovisioner.models.runtime.cycle import CycleDriver

logger = logging.getLogger(__name__)


def main() -> int:
    """Run the reconciliation loop forever."""
    settings = load_runtime_settings()
    configure_logging(verbose=settings.debug)
    logger.info(
        "Starting LiteLLM ModelProvisioner %s (config=%s, interval=%ss)",
        __version__,
        settings.config_path,
        settings.sleep_interval,
    )
    try:
        CycleDriver(settings).run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
