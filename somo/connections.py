"""Reading, decoding and filtering the system's TCP and UDP sockets."""

from __future__ import annotations

import ipaddress
import os
import re
from pathlib import Path

from somo.schemas import AddressType, Connection, FilterOptions, NetEntry
from somo.utils import get_address_parts

PROC_ROOT = "/proc"

_SOCKET_LINK = re.compile(r"socket:\[(\d+)\]")

_STATES = {
    0x01: "established",
    0x02: "synsent",
    0x03: "synrecv",
    0x04: "finwait1",
    0x05: "finwait2",
    0x06: "timewait",
    0x07: "close",
    0x08: "closewait",
    0x09: "lastack",
    0x0A: "listen",
    0x0B: "closing",
    0x0C: "newsynrecv",
}


def _parse_stat(stat_text: str) -> tuple[str, str] | None:
    """Return ``(comm, pid)`` from the contents of a process ``stat`` file."""
    open_paren = stat_text.find("(")
    close_paren = stat_text.rfind(")")
    if open_paren < 0 or close_paren < open_paren:
        return None
    pid = stat_text[:open_paren].strip()
    if not pid.isdigit():
        return None
    return stat_text[open_paren + 1 : close_paren], pid


def get_processes(proc_root: str | os.PathLike = PROC_ROOT) -> dict[int, tuple[str, str]]:
    """Map every socket inode to the ``(program, pid)`` of a process holding it."""
    sockets: dict[int, tuple[str, str]] = {}
    for entry in Path(proc_root).iterdir():
        if not entry.name.isdigit():
            continue
        try:
            stat_text = (entry / "stat").read_text()
            fds = list((entry / "fd").iterdir())
        except OSError:
            continue
        process = _parse_stat(stat_text)
        if process is None:
            continue
        for fd in fds:
            try:
                target = os.readlink(fd)
            except OSError:
                continue
            match = _SOCKET_LINK.fullmatch(target)
            if match:
                sockets[int(match.group(1))] = process
    return sockets


def decode_socket_address(hex_address: str) -> str:
    """Turn a kernel ``ADDR:PORT`` hex pair into ``ip:port`` or ``[ipv6]:port``."""
    try:
        addr_hex, port_hex = hex_address.split(":")
        raw = bytes.fromhex(addr_hex)
        port = int(port_hex, 16)
    except ValueError as exc:
        raise ValueError(f"invalid socket address: {hex_address!r}") from exc

    if len(raw) == 4:
        return f"{ipaddress.IPv4Address(raw[::-1])}:{port}"
    if len(raw) == 16:
        packed = b"".join(raw[word : word + 4][::-1] for word in range(0, 16, 4))
        ip = ipaddress.IPv6Address(packed)
        mapped = ip.ipv4_mapped
        shown = f"::ffff:{mapped}" if mapped is not None else ip.compressed
        return f"[{shown}]:{port}"
    raise ValueError(f"invalid socket address: {hex_address!r}")


def parse_net_table(text: str, protocol: str) -> list[NetEntry]:
    """Parse the contents of a ``/proc/net/{tcp,udp}[6]`` table."""
    entries = []
    for line in text.splitlines()[1:]:
        fields = line.split()
        if not fields:
            continue
        if len(fields) < 10:
            raise ValueError(f"malformed socket table line: {line!r}")
        state_code = int(fields[3], 16)
        try:
            state = _STATES[state_code]
        except KeyError:
            raise ValueError(f"unknown socket state: {fields[3]!r}") from None
        entries.append(
            NetEntry(
                protocol=protocol,
                local_address=decode_socket_address(fields[1]),
                remote_address=decode_socket_address(fields[2]),
                state=state,
                inode=int(fields[9]),
            )
        )
    return entries


def read_net_entries(
    protocol: str, include_ipv6: bool, proc_root: str | os.PathLike = PROC_ROOT
) -> list[NetEntry]:
    """Read the IPv4 (and optionally IPv6) socket table for ``protocol``."""
    net_dir = Path(proc_root) / "net"
    names = [protocol, f"{protocol}6"] if include_ipv6 else [protocol]
    entries: list[NetEntry] = []
    for name in names:
        entries.extend(parse_net_table((net_dir / name).read_text(), protocol))
    return entries


def filter_out_connection(connection: Connection, filter_options: FilterOptions) -> bool:
    """Return True if the connection does not meet the filter options."""
    expected = (
        (filter_options.by_remote_port, connection.remote_port),
        (filter_options.by_local_port, connection.local_port),
        (filter_options.by_remote_address, connection.remote_address),
        (filter_options.by_program, connection.program),
        (filter_options.by_pid, connection.pid),
    )
    if any(wanted is not None and wanted != actual for wanted, actual in expected):
        return True
    if filter_options.by_listen and connection.state != "listen":
        return True
    if filter_options.by_open and connection.state == "close":
        return True
    return False


def get_address_type(remote_address: str) -> AddressType:
    """Classify an address as localhost, unspecified or external."""
    if remote_address in ("127.0.0.1", "[::1]"):
        return AddressType.LOCALHOST
    if remote_address in ("0.0.0.0", "[::]"):
        return AddressType.UNSPECIFIED
    return AddressType.EXTERN


def get_connection_data(
    net_entry: NetEntry, all_processes: dict[int, tuple[str, str]]
) -> Connection:
    """Build a connection from a socket table row and the process map."""
    _, local_port = get_address_parts(net_entry.local_address)
    remote_address, remote_port = get_address_parts(net_entry.remote_address)
    program, pid = all_processes.get(net_entry.inode, ("-", "-"))
    return Connection(
        proto=net_entry.protocol,
        local_port=local_port,
        remote_address=remote_address,
        remote_port=remote_port,
        program=program,
        pid=pid,
        state=net_entry.state,
        address_type=get_address_type(remote_address),
    )


def _collect(
    protocol: str,
    all_processes: dict[int, tuple[str, str]],
    filter_options: FilterOptions,
) -> list[Connection]:
    entries = read_net_entries(protocol, not filter_options.exclude_ipv6)
    connections = (get_connection_data(entry, all_processes) for entry in entries)
    return [conn for conn in connections if not filter_out_connection(conn, filter_options)]


def get_tcp_connections(
    all_processes: dict[int, tuple[str, str]], filter_options: FilterOptions
) -> list[Connection]:
    """Return the filtered TCP connections."""
    return _collect("tcp", all_processes, filter_options)


def get_udp_connections(
    all_processes: dict[int, tuple[str, str]], filter_options: FilterOptions
) -> list[Connection]:
    """Return the filtered UDP connections."""
    return _collect("udp", all_processes, filter_options)


def get_all_connections(filter_options: FilterOptions) -> list[Connection]:
    """Return TCP and/or UDP connections according to the protocol filter."""
    all_processes = get_processes()
    if filter_options.by_proto == "tcp":
        return get_tcp_connections(all_processes, filter_options)
    if filter_options.by_proto == "udp":
        return get_udp_connections(all_processes, filter_options)
    return get_tcp_connections(all_processes, filter_options) + get_udp_connections(
        all_processes, filter_options
    )