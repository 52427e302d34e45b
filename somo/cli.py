"""Command line interface: flag parsing, table output and process killing."""

from __future__ import annotations

import argparse
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from somo.connections import get_all_connections
from somo.schemas import Connection, FilterOptions
from somo.table import print_connections_table
from somo.utils import pretty_print_error, pretty_print_info

VERSION = "1.0.1"


@dataclass
class Flags:
    """Flag values given on the command line."""

    kill: bool = False
    proto: str | None = None
    ip: str | None = None
    remote_port: str | None = None
    port: str | None = None
    program: str | None = None
    pid: str | None = None
    open: bool = False
    listen: bool = False
    exclude_ipv6: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog="somo",
        description="A human-friendly alternative to netstat for socket and port monitoring on Linux.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-k", "--kill", action="store_true")
    parser.add_argument("--proto")
    parser.add_argument("--ip")
    parser.add_argument("--remote-port")
    parser.add_argument("-p", "--port")
    parser.add_argument("--program")
    parser.add_argument("--pid")
    parser.add_argument("-o", "--open", action="store_true")
    parser.add_argument("-l", "--listen", action="store_true")
    parser.add_argument("--exclude-ipv6", action="store_true")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Flags:
    """Parse command line arguments into flags."""
    namespace = build_parser().parse_args(argv)
    return Flags(**vars(namespace))


def kill_process(pid: str) -> bool:
    """Send the kill signal to a process; return whether it succeeded."""
    try:
        result = subprocess.run(["kill", pid], capture_output=True)
    except OSError as exc:
        raise RuntimeError(f"Failed to kill process with PID {pid}") from exc

    if result.returncode == 0:
        pretty_print_info(f"Killed process with PID {pid}.")
        return True
    print("Failed to kill process, try running")
    pretty_print_error("Couldn't kill process! Try again using sudo.")
    return False


def interactive_process_kill(connections: Sequence[Connection]) -> None:
    """Ask for a table index and kill the process of that connection."""
    try:
        answer = input("Which process to kill (search or type index)? ")
    except (EOFError, KeyboardInterrupt):
        print("Couldn't find process.")
        return
    try:
        choice = int(answer.strip())
    except ValueError:
        choice = 0
    if not 1 <= choice <= len(connections):
        print("Couldn't find process.")
        return
    kill_process(connections[choice - 1].pid)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command."""
    flags = parse_args(argv)
    filter_options = FilterOptions(
        by_proto=flags.proto,
        by_remote_address=flags.ip,
        by_remote_port=flags.remote_port,
        by_local_port=flags.port,
        by_program=flags.program,
        by_pid=flags.pid,
        by_open=flags.open,
        by_listen=flags.listen,
        exclude_ipv6=flags.exclude_ipv6,
    )
    all_connections = get_all_connections(filter_options)
    print_connections_table(all_connections)
    if flags.kill:
        interactive_process_kill(all_connections)
    return 0