"""Port and protocol value types."""

from enum import Enum

from pydantic import BaseModel, Field


class Protocol(str, Enum):
    """Transport protocol of an exposed port."""

    TCP = "tcp"
    UDP = "udp"

    def __str__(self) -> str:
        return self.value


class PortMapping(BaseModel):
    """One container port published on the host."""

    source: int = Field(ge=0, le=65535)
    host: int = Field(ge=0, le=65535)
    protocol: Protocol = Protocol.TCP

    model_config = {"frozen": True}

    @property
    def key(self) -> str:
        """Engine API port key, e.g. "5984/tcp"."""
        return f"{self.source}/{self.protocol.value}"


class HostPort(BaseModel):
    """Host socket a container port is bound to."""

    ip: str
    port: int

    model_config = {"frozen": True}

    def __str__(self) -> str:
        if ":" in self.ip:
            return f"[{self.ip}]:{self.port}"
        return f"{self.ip}:{self.port}"


def parse_port_key(key: str) -> tuple[int, Protocol]:
    """Split an Engine API port key ("5984/tcp") into port and protocol.

    Keys without a protocol suffix default to TCP, as the Engine does.
    """
    port, _, proto = key.partition("/")
    return int(port), Protocol(proto or Protocol.TCP.value)
