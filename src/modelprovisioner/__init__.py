"""Keep a LiteLLM gateway's model list in sync with its inference backends.

Examples:
    >>> from modelprovisioner import CycleDriver, load_runtime_settings
    >>> driver = CycleDriver(load_runtime_settings({}))  # doctest: +SKIP
    >>> driver.run_forever()  # doctest: +SKIP
"""

from modelprovisioner.core.config import load_config, load_runtime_settings
from modelprovisioner.models.runtime import CycleDriver, Reconciler, plan_changes

__version__ = "0.1.0"

__all__ = ["CycleDriver", "Reconciler", "load_config", "load_runtime_settings", "plan_changes"]
