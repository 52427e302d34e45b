import os

import pytest

from somo.connections import (
    decode_socket_address,
    filter_out_connection,
    get_address_type,
    get_connection_data,
    get_processes,
    parse_net_table,
    read_net_entries,
)
from somo.schemas import AddressType, Connection, FilterOptions, NetEntry

HEADER = (
    "  sl  local_address rem_address   st tx_queue rx_queue tr tm->when "
    "retrnsmt   uid  timeout inode\n"
)
TCP_LINE = (
    "   0: 0100007F:0CEA 00000000:0000 0A 00000000:00000000 00:00000000 "
    "00000000   128        0 27564 1 0000000000000000 100 0 0 10 0\n"
)
TCP6_LINE = (
    "   0: 00000000000000000000000001000000:1F90 "
    "00000000000000000000000000000000:0000 01 00000000:00000000 00:00000000 "
    "00000000  1000        0 9911 1 0000000000000000 20 4 1 10 -1\n"
)


def _conn(**changes):
    values = dict(
        proto="tcp",
        local_port="8080",
        remote_port="443",
        remote_address="8.8.8.8",
        program="nginx",
        pid="123",
        state="established",
        address_type=AddressType.EXTERN,
    )
    values.update(changes)
    return Connection(**values)


def test_get_address_type():
    assert get_address_type("127.0.0.1") is AddressType.LOCALHOST
    assert get_address_type("[::1]") is AddressType.LOCALHOST
    assert get_address_type("0.0.0.0") is AddressType.UNSPECIFIED
    assert get_address_type("[::]") is AddressType.UNSPECIFIED
    assert get_address_type("8.8.8.8") is AddressType.EXTERN


def test_filter_out_connection_by_port():
    conn = _conn()
    assert filter_out_connection(conn, FilterOptions(by_local_port="8080")) is False
    assert filter_out_connection(conn, FilterOptions(by_local_port="8181")) is True


def test_filter_out_connection_by_state():
    conn = _conn(proto="udp", state="close")
    assert filter_out_connection(conn, FilterOptions(by_open=True)) is True
    assert filter_out_connection(conn, FilterOptions(by_open=False)) is False

    conn.state = "listen"
    assert filter_out_connection(conn, FilterOptions(by_listen=True)) is False
    assert filter_out_connection(conn, FilterOptions(by_listen=False)) is False


def test_filter_out_connection_by_pid_and_program():
    conn = _conn(state="close")
    assert filter_out_connection(conn, FilterOptions(by_pid="123")) is False
    assert filter_out_connection(conn, FilterOptions(by_program="postgres")) is True


def test_filter_out_connection_by_multiple_conditions():
    conn = _conn(program="python", state="listen")
    options = FilterOptions(
        by_local_port="8080", by_pid="123", by_program="python", by_listen=True
    )
    assert filter_out_connection(conn, options) is False

    conn.state = "close"
    assert filter_out_connection(conn, options) is True


def test_filter_out_connection_by_remote_address_and_port():
    conn = _conn()
    assert filter_out_connection(conn, FilterOptions(by_remote_address="8.8.8.8")) is False
    assert filter_out_connection(conn, FilterOptions(by_remote_address="1.1.1.1")) is True
    assert filter_out_connection(conn, FilterOptions(by_remote_port="53")) is True


@pytest.mark.parametrize(
    "hex_address, expected",
    [
        ("0100007F:0050", "127.0.0.1:80"),
        ("00000000:0000", "0.0.0.0:0"),
        ("00000000000000000000000001000000:1F90", "[::1]:8080"),
        ("00000000000000000000000000000000:0000", "[::]:0"),
        ("0000000000000000FFFF00000100007F:0035", "[::ffff:127.0.0.1]:53"),
    ],
)
def test_decode_socket_address(hex_address, expected):
    assert decode_socket_address(hex_address) == expected


@pytest.mark.parametrize("bad", ["zz:0050", "0100007F", "0100:0050"])
def test_decode_socket_address_rejects_garbage(bad):
    with pytest.raises(ValueError):
        decode_socket_address(bad)


def test_parse_net_table_ipv4():
    entries = parse_net_table(HEADER + TCP_LINE, "tcp")
    assert entries == [NetEntry("tcp", "127.0.0.1:3306", "0.0.0.0:0", "listen", 27564)]


def test_parse_net_table_ipv6_and_blank_lines():
    entries = parse_net_table(HEADER + TCP6_LINE + "\n", "tcp")
    assert entries == [NetEntry("tcp", "[::1]:8080", "[::]:0", "established", 9911)]


def test_parse_net_table_header_only_is_empty():
    assert parse_net_table(HEADER, "udp") == []


def test_parse_net_table_rejects_short_line():
    with pytest.raises(ValueError):
        parse_net_table(HEADER + "   0: 0100007F:0CEA 00000000:0000 0A\n", "tcp")


def test_get_connection_data_with_known_process():
    entry = NetEntry("tcp", "127.0.0.1:3306", "0.0.0.0:0", "listen", 27564)
    conn = get_connection_data(entry, {27564: ("mysqld", "42")})
    assert conn == Connection(
        proto="tcp",
        local_port="3306",
        remote_address="0.0.0.0",
        remote_port="0",
        program="mysqld",
        pid="42",
        state="listen",
        address_type=AddressType.UNSPECIFIED,
    )


def test_get_connection_data_without_process():
    entry = NetEntry("udp", "[::1]:53", "[::1]:5353", "close", 7)
    conn = get_connection_data(entry, {})
    assert (conn.program, conn.pid) == ("-", "-")
    assert conn.remote_address == "[::1]"
    assert conn.remote_port == "5353"
    assert conn.address_type is AddressType.LOCALHOST


def test_read_net_entries(tmp_path):
    net = tmp_path / "net"
    net.mkdir()
    (net / "tcp").write_text(HEADER + TCP_LINE)
    (net / "tcp6").write_text(HEADER + TCP6_LINE)

    only_v4 = read_net_entries("tcp", False, tmp_path)
    assert [e.inode for e in only_v4] == [27564]

    both = read_net_entries("tcp", True, tmp_path)
    assert [e.inode for e in both] == [27564, 9911]


def test_read_net_entries_missing_table(tmp_path):
    (tmp_path / "net").mkdir()
    with pytest.raises(OSError):
        read_net_entries("udp", False, tmp_path)


def test_get_processes_maps_socket_inodes(tmp_path):
    proc = tmp_path / "123"
    (proc / "fd").mkdir(parents=True)
    (proc / "stat").write_text("123 (nginx) S 1 123 123 0 -1\n")
    os.symlink("socket:[4567]", proc / "fd" / "3")
    os.symlink("/dev/null", proc / "fd" / "0")

    other = tmp_path / "self"
    other.mkdir()

    assert get_processes(tmp_path) == {4567: ("nginx", "123")}


def test_get_processes_keeps_parentheses_in_name(tmp_path):
    proc = tmp_path / "9"
    (proc / "fd").mkdir(parents=True)
    (proc / "stat").write_text("9 (my (prog)) S 1 9 9 0 -1\n")
    os.symlink("socket:[11]", proc / "fd" / "4")

    assert get_processes(tmp_path) == {11: ("my (prog)", "9")}


def test_get_processes_skips_unreadable_process(tmp_path):
    (tmp_path / "77").mkdir()
    assert get_processes(tmp_path) == {}