"""Data types shared by the connection reader, the table and the command line."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AddressType(Enum):
    """Kind of a remote IP address."""

    LOCALHOST = "localhost"
    UNSPECIFIED = "unspecified"
    EXTERN = "extern"


@dataclass
class Connection:
    """A processed socket connection with everything shown in the table."""

    proto: str
    local_port: str
    remote_address: str
    remote_port: str
    program: str
    pid: str
    state: str
    address_type: AddressType


@dataclass
class NetEntry:
    """One row of a kernel TCP or UDP socket table.

    Addresses are kept as printable socket addresses such as
    ``127.0.0.1:80`` or ``[::1]:80``.
    """

    protocol: str
    local_address: str
    remote_address: str
    state: str
    inode: int


@dataclass
class FilterOptions:
    """Conditions a connection has to meet to be listed."""

    by_proto: str | None = None
    by_program: str | None = None
    by_pid: str | None = None
    by_remote_address: str | None = None
    by_remote_port: str | None = None
    by_local_port: str | None = None
    by_open: bool = False
    by_listen: bool = False
    exclude_ipv6: bool = False