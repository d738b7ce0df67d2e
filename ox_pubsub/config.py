"""Configuration for the OX pubsub engine."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from ox_pubsub.exceptions import ConfigurationError


DEFAULT_SERVICES = {
    "active_calls": "pubsub.active-calls.xmpp.onsip.com",
    "user_agents": "pubsub.user-agents.xmpp.onsip.com",
    "voicemail": "pubsub.voicemail.xmpp.onsip.com",
    "recent_calls": "pubsub.recent-calls.xmpp.onsip.com",
}


class ServiceConfig(BaseModel):
    """Configuration for a single pubsub service."""
    address: str
    enabled: bool = True

    @field_validator("address")
    def validate_address(cls, v: str) -> str:
        v = v.strip()
        if v.startswith("xmpp:"):
            v = v[len("xmpp:"):]
        if not v:
            raise ValueError("Service address cannot be empty")
        return v


def _default_services() -> Dict[str, ServiceConfig]:
    return {
        name: ServiceConfig(address=address)
        for name, address in DEFAULT_SERVICES.items()
    }


class PubSubConfig(BaseSettings):
    """Main pubsub engine configuration."""
    model_config = SettingsConfigDict(
        env_prefix="OX_PUBSUB_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore"
    )

    services: Dict[str, ServiceConfig] = Field(default_factory=_default_services)

    # Protocol behaviour
    max_subscribe_attempts: int = 5
    strict_jid_match: bool = False
    options_namespace: str = "pubsub#"

    @field_validator("max_subscribe_attempts")
    def validate_max_subscribe_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_subscribe_attempts must be at least 1")
        return v

    @classmethod
    def from_yaml(cls, path: str) -> "PubSubConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if "services" in data:
            data["services"] = {
                name: ServiceConfig(**service)
                if isinstance(service, dict) else ServiceConfig(address=service)
                for name, service in data["services"].items()
            }

        return cls(**data)

    def get_service(self, name: str) -> ServiceConfig:
        """Get configuration for a named service."""
        service: Optional[ServiceConfig] = self.services.get(name)
        if service is None:
            raise ConfigurationError(f"No pubsub service configured as {name!r}")
        return service
