"""
Configuration for the permission checker.
"""

from dataclasses import dataclass

from ..types.errors import ConfigurationError
from ..util.config import get_config_value


@dataclass
class Config:
    """Settings shared by a PermissionChecker and its audit/metrics hooks"""
    checker_name: str = "PermissionChecker"
    audit_enabled: bool = True
    log_traces: bool = False
    metrics_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from GATEHOUSE_* environment variables"""
        defaults = cls()
        return cls(
            checker_name=get_config_value("checker_name", defaults.checker_name),
            audit_enabled=get_config_value("audit_enabled", defaults.audit_enabled, bool),
            log_traces=get_config_value("log_traces", defaults.log_traces, bool),
            metrics_enabled=get_config_value("metrics_enabled", defaults.metrics_enabled, bool),
        )

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.checker_name or not self.checker_name.strip():
            raise ConfigurationError(
                "checker_name must not be empty",
                config_key="checker_name",
                config_value=self.checker_name,
            )
        return True
