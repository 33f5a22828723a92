"""Errors raised while reading the provisioner's configuration document."""

from modelprovisioner.core.exceptions import ProvisionerError


class ConfigError(ProvisionerError):
    """The configuration file is missing, unparseable or fails validation."""
