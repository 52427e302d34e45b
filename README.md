# somo

A human-friendly alternative to `netstat` for socket and port monitoring on Linux.

`somo` reads the kernel's TCP and UDP socket tables from `/proc/net`. It matches each socket inode to the process that holds it, found through `/proc/<pid>/fd`, and prints the result as a table in the terminal. You can filter the list. You can also pick a connection from the list and kill the process that owns it.

## Installation

```
pip install .
```

`somo` needs Python 3.10 or newer and runs on Linux only. Its only dependency is `rich`.

## Usage

Show every TCP and UDP connection, IPv4 and IPv6:

```
somo
```

Each row shows these columns:

- the index of the connection
- the protocol (`tcp` or `udp`)
- the local port
- the remote address. `127.0.0.1` and `[::1]` are marked as localhost, and `0.0.0.0` and `[::]` are shown in italics
- the remote port
- the PID and program name of the owning process, or `-` when no process could be found
- the socket state, such as `listen`, `established` or `close`

The total number of connections is printed below the table.

Sockets of other users' processes can only be matched to a process when `somo` runs as root.

### Filters

| Flag | Meaning |
| --- | --- |
| `--proto tcp` / `--proto udp` | show only one protocol |
| `--ip ADDRESS` | show only connections to this remote address |
| `--remote-port PORT` | show only connections to this remote port |
| `-p`, `--port PORT` | show only connections on this local port |
| `--program NAME` | show only sockets owned by this program |
| `--pid PID` | show only sockets owned by this PID |
| `-o`, `--open` | hide sockets in the `close` state |
| `-l`, `--listen` | show only sockets in the `listen` state |
| `--exclude-ipv6` | leave out IPv6 sockets |
| `-V`, `--version` | print the version and exit |

Values are compared as exact strings. IPv6 remote addresses are written in brackets, for example `--ip "[::1]"`.

Filters can be combined. For example, to list listening TCP sockets on local port 8080:

```
somo --proto tcp -l -p 8080
```

### Killing a process

```
somo -k
```

With `-k` (or `--kill`), `somo` prints the table and then asks for the index of a connection. It runs `kill` with the PID of that connection's process. If the index is not a number from the table, it prints `Couldn't find process.` If `kill` fails, for example for another user's process, it prints an error and suggests running again with `sudo`.

The prompt takes a row index only. It does not search by name.

## Library use

The modules can also be used directly:

```python
from somo.schemas import FilterOptions
from somo.connections import get_all_connections
from somo.table import print_connections_table

connections = get_all_connections(FilterOptions(by_proto="tcp", by_listen=True))
print_connections_table(connections)
```

- `somo.schemas` holds the data types `Connection`, `NetEntry`, `FilterOptions` and the `AddressType` enum.
- `somo.connections` reads and filters sockets. `parse_net_table(text, protocol)` parses the contents of a `/proc/net/tcp`-style table. `decode_socket_address("0100007F:0050")` returns `"127.0.0.1:80"`. `get_processes()` maps socket inodes to `(program, pid)`.
- `somo.table` builds the table. `build_connections_markdown(connections, width)` returns the table as markdown text, and `print_connections_table(connections)` prints it.
- `somo.cli` holds the command: `parse_args`, `kill_process`, `interactive_process_kill` and `main`.
- `somo.utils` holds `split_address`, `get_address_parts`, `pretty_print_info` and `pretty_print_error`.

## Development

```
pip install -e ".[test]"
pytest
```