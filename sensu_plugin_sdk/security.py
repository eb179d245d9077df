"""Reusable options for plugins that talk to the monitoring backend over TLS."""

from __future__ import annotations

import ssl
from dataclasses import dataclass

from sensu_plugin_sdk.core.errors import ConfigurationError
from sensu_plugin_sdk.core.options import ConfigOption, ScalarOption
from sensu_plugin_sdk.core.slot import AttrSlot


@dataclass
class SecurityConfig:
    """TLS settings for backend communication.

    Attributes:
        ca_certificate: Path to a CA certificate, for self-signed backends.
        insecure_skip_verify: Skip certificate and hostname verification.
            Not recommended outside of testing.
    """

    ca_certificate: str = ""
    insecure_skip_verify: bool = False

    def ssl_context(self) -> ssl.SSLContext:
        """Build an SSL context honoring the configured CA and verification.

        Raises:
            ConfigurationError: If the CA certificate cannot be loaded.
        """
        try:
            context = ssl.create_default_context(cafile=self.ca_certificate or None)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(f"failed to load CA certificate {self.ca_certificate}: {e}") from e
        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context


def security_options(config: SecurityConfig) -> list[ConfigOption]:
    """Return the ``--sensu-ca-cert`` and ``--sensu-insecure-skip-verify`` options."""
    return [
        ScalarOption(
            value=AttrSlot(config, "ca_certificate"),
            path="sensu-ca-cert",
            env="SENSU_CA_CERT",
            argument="sensu-ca-cert",
            default=config.ca_certificate,
            usage="--sensu-ca-cert /etc/ssl/self-signed-ca.crt",
        ),
        ScalarOption(
            value=AttrSlot(config, "insecure_skip_verify"),
            path="sensu-insecure-skip-verify",
            env="SENSU_INSECURE_SKIP_VERIFY",
            argument="sensu-insecure-skip-verify",
            default=config.insecure_skip_verify,
            usage="--sensu-insecure-skip-verify (disables TLS hostname verification)",
        ),
    ]
