"""Device configuration dataclasses - Virtual servers and pools from bigip.conf."""

from dataclasses import dataclass, field


@dataclass
class PoolMember:
    """One backend destination within a pool."""

    name: str  # node:port
    address: str = ""
    disabled: bool = False  # session user-disabled
    down: bool = False  # state user-down

    @property
    def is_active(self) -> bool:
        return not self.disabled and not self.down


@dataclass
class Pool:
    """A load-balancing pool."""

    name: str
    monitor: str = ""
    members: list[PoolMember] = field(default_factory=list)

    def active_members(self) -> int:
        """Members that are neither user-disabled nor user-down."""
        return sum(1 for m in self.members if m.is_active)

    def total_members(self) -> int:
        return len(self.members)


@dataclass
class VirtualServer:
    """A configured virtual server.

    `pool` is a reference by name and may point at a pool that does not
    exist in the configuration.
    """

    name: str
    pool: str = ""
    disabled: bool = False
    destination: str = ""


@dataclass
class DeviceConfig:
    """Virtual servers and pools keyed by their cleaned names."""

    virtual_servers: dict[str, VirtualServer] = field(default_factory=dict)
    pools: dict[str, Pool] = field(default_factory=dict)

    def resolve_pool(self, vs: VirtualServer) -> Pool | None:
        """Return the pool a virtual server references, or None if unknown."""
        return self.pools.get(vs.pool)
