"""
Configuration loading for graphbind clients.

Settings shared by all clients come from the environment (GRAPHBIND_*).
Per-client endpoints can be kept in a YAML file:

    clients:
      books:
        url: http://localhost:8080/graphql
        timeout: 10
        headers:
          X-Api-Key: secret
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from .transport.http_logging import LoggerLevel


class ClientSettings(BaseSettings):
    """Environment-driven settings applied to every client."""
    model_config = SettingsConfigDict(env_prefix="GRAPHBIND_", env_file=".env", extra="ignore")

    timeout: float = 30.0
    disable_ssl_validation: bool = False
    logger_level: LoggerLevel = LoggerLevel.NONE
    sensitive_headers: list[str] = ["Authorization"]
    document_locations: list[str] = ["graphql-documents"]


@dataclass
class ClientConfig:
    """Configuration for a single client."""
    name: str
    url: str
    timeout: Optional[float] = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class ClientsConfig:
    """All clients configured in a YAML file."""
    clients: dict[str, ClientConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientsConfig":
        """Create config from dictionary."""
        clients = {}
        for name, client_data in (data.get("clients") or {}).items():
            client_data = client_data or {}
            clients[name] = ClientConfig(
                name=name,
                url=client_data.get("url", ""),
                timeout=client_data.get("timeout"),
                headers={str(k): str(v) for k, v in (client_data.get("headers") or {}).items()},
            )
        return cls(clients=clients)

    def get(self, name: str) -> Optional[ClientConfig]:
        """Get configuration of a client by name."""
        return self.clients.get(name)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "clients": {
                name: {
                    "url": client.url,
                    "timeout": client.timeout,
                    "headers": client.headers,
                }
                for name, client in self.clients.items()
            },
        }

    def save(self, path: Path | str = "graphbind.yaml") -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_clients_config(path: Path | str = "graphbind.yaml") -> ClientsConfig | None:
    """Load client configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    return ClientsConfig.from_dict(data)
