"""BigIP Configuration Parser.

Parses `config/bigip.conf` from a qkview into VirtualServer and Pool objects.

IMPORTANT DESIGN NOTES:
1. tmsh configs are brace-delimited and nest arbitrarily deep; only the
   blocks we model (ltm virtual, ltm pool, members, member) are tracked.
2. A block is closed when the global brace depth returns to the depth it
   was entered at. Nested blocks close first and pop back to their parent.
3. Malformed input never raises: a block still open at end of input is
   discarded and reported in `errors`.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from qkview_doctor.model.device import DeviceConfig, Pool, PoolMember, VirtualServer


class ParseState(Enum):
    """Which block the scanner is currently inside."""

    NONE = "none"
    VIRTUAL = "virtual"
    POOL = "pool"
    POOL_MEMBERS = "pool_members"
    MEMBER = "member"


@dataclass
class ParseContext:
    """Context during parsing to track current position."""

    state: ParseState = ParseState.NONE
    brace_depth: int = 0
    block_start_depth: int = 0
    members_start_depth: int = 0
    member_start_depth: int = 0
    block_line: int = 0


def clean_name(full_name: str) -> str:
    """Reduce a path-qualified object name to its display name.

    /Common/app/vs_web -> vs_web, /Common -> Common.
    """
    parts = full_name.split("/")
    if len(parts) >= 3:
        return parts[-1]
    return full_name.removeprefix("/")


class BigIPConfigParser:
    """Line-oriented state machine over tmsh configuration text."""

    # Example: ltm virtual /Common/vs_web {
    VIRTUAL_RE = re.compile(r"^ltm virtual\s+(/\S+)\s*\{")
    # Example: ltm pool /Common/pool_web {
    POOL_RE = re.compile(r"^ltm pool\s+(/\S+)\s*\{")
    # Example:     /Common/10.0.0.10:80 {
    MEMBER_RE = re.compile(r"^\s*(/\S+:\d+)\s*\{")

    POOL_REF_RE = re.compile(r"^\s*pool\s+(/\S+)")
    DESTINATION_RE = re.compile(r"^\s*destination\s+(/\S+)")
    ADDRESS_RE = re.compile(r"^\s*address\s+(\S+)")
    MONITOR_RE = re.compile(r"^\s*monitor\s+(/\S+)")

    def __init__(self) -> None:
        self.errors: list[str] = []

    def parse_file(self, path: str | Path) -> DeviceConfig:
        """Read and parse a bigip.conf file."""
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        return self.parse(text)

    def parse(self, text: str) -> DeviceConfig:
        """Parse configuration text into a DeviceConfig.

        Args:
            text: Full contents of bigip.conf.

        Returns:
            DeviceConfig with every virtual server and pool whose block was
            properly closed.
        """
        self.errors = []
        config = DeviceConfig()
        ctx = ParseContext()

        current_vs: VirtualServer | None = None
        current_pool: Pool | None = None
        current_member: PoolMember | None = None

        for line_num, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()

            if not stripped or stripped.startswith("#"):
                continue

            open_braces = stripped.count("{")
            close_braces = stripped.count("}")

            vs_match = self.VIRTUAL_RE.match(line)
            if vs_match:
                self._report_abandoned(ctx, current_vs, current_pool)
                ctx.state = ParseState.VIRTUAL
                ctx.block_start_depth = ctx.brace_depth
                ctx.block_line = line_num
                ctx.brace_depth += open_braces
                current_vs = VirtualServer(name=clean_name(vs_match.group(1)))
                current_pool = None
                current_member = None
                continue

            pool_match = self.POOL_RE.match(line)
            if pool_match:
                self._report_abandoned(ctx, current_vs, current_pool)
                ctx.state = ParseState.POOL
                ctx.block_start_depth = ctx.brace_depth
                ctx.block_line = line_num
                ctx.brace_depth += open_braces
                current_pool = Pool(name=clean_name(pool_match.group(1)))
                current_vs = None
                current_member = None
                continue

            if ctx.state == ParseState.POOL and "members {" in stripped:
                ctx.state = ParseState.POOL_MEMBERS
                ctx.members_start_depth = ctx.brace_depth
                ctx.brace_depth += open_braces
                continue

            if ctx.state == ParseState.POOL_MEMBERS:
                member_match = self.MEMBER_RE.match(line)
                if member_match:
                    ctx.state = ParseState.MEMBER
                    ctx.member_start_depth = ctx.brace_depth
                    ctx.brace_depth += open_braces
                    current_member = PoolMember(name=clean_name(member_match.group(1)))
                    continue

            ctx.brace_depth += open_braces - close_braces

            if close_braces > 0:
                if ctx.state == ParseState.MEMBER and ctx.brace_depth <= ctx.member_start_depth:
                    if current_pool is not None and current_member is not None:
                        current_pool.members.append(current_member)
                    current_member = None
                    ctx.state = ParseState.POOL_MEMBERS

                if ctx.state == ParseState.POOL_MEMBERS and ctx.brace_depth <= ctx.members_start_depth:
                    ctx.state = ParseState.POOL

                if ctx.state == ParseState.POOL and ctx.brace_depth <= ctx.block_start_depth:
                    if current_pool is not None:
                        config.pools[current_pool.name] = current_pool
                    current_pool = None
                    ctx.state = ParseState.NONE

                if ctx.state == ParseState.VIRTUAL and ctx.brace_depth <= ctx.block_start_depth:
                    if current_vs is not None:
                        config.virtual_servers[current_vs.name] = current_vs
                    current_vs = None
                    ctx.state = ParseState.NONE

            # Lines that only close blocks carry no fields.
            if close_braces == 0 or open_braces > 0:
                self._parse_field(line, stripped, ctx.state, current_vs, current_pool, current_member)

        self._report_abandoned(ctx, current_vs, current_pool)
        return config

    def _parse_field(
        self,
        line: str,
        stripped: str,
        state: ParseState,
        vs: VirtualServer | None,
        pool: Pool | None,
        member: PoolMember | None,
    ) -> None:
        """Apply a field line to whichever object is being built."""
        if state == ParseState.VIRTUAL and vs is not None:
            pool_ref = self.POOL_REF_RE.match(line)
            if pool_ref:
                vs.pool = clean_name(pool_ref.group(1))
                return
            destination = self.DESTINATION_RE.match(line)
            if destination:
                vs.destination = clean_name(destination.group(1))
                return
            if stripped == "disabled":
                vs.disabled = True

        elif state in (ParseState.POOL, ParseState.POOL_MEMBERS) and pool is not None:
            monitor = self.MONITOR_RE.match(line)
            if monitor:
                pool.monitor = clean_name(monitor.group(1))

        elif state == ParseState.MEMBER and member is not None:
            address = self.ADDRESS_RE.match(line)
            if address:
                member.address = address.group(1)
            elif "session user-disabled" in stripped:
                member.disabled = True
            elif "state user-down" in stripped:
                member.down = True

    def _report_abandoned(
        self,
        ctx: ParseContext,
        vs: VirtualServer | None,
        pool: Pool | None,
    ) -> None:
        """Record a block that is being dropped without its closing brace."""
        if ctx.state == ParseState.VIRTUAL and vs is not None:
            self.errors.append(
                f"line {ctx.block_line}: unterminated ltm virtual block '{vs.name}' discarded"
            )
        elif ctx.state != ParseState.NONE and pool is not None:
            self.errors.append(
                f"line {ctx.block_line}: unterminated ltm pool block '{pool.name}' discarded"
            )
