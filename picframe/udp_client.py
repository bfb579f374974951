"""Console client that talks to the frame's network debug printer over UDP.

The client announces itself with ``setclient``, forwards every line typed
on standard input (for example ``dbglevel=<0-9>``, ``stdout=0|1``,
``netprint=0|1``) and prints every datagram the server sends back.
"""

from __future__ import annotations

import os
import socket
import sys
import threading
from typing import Optional, Sequence, TextIO, Union

REGISTER_MESSAGE = b"setclient"
COMMAND_BUFFER_SIZE = 128
COMMAND_MAX = 126
RECV_BUFFER_SIZE = 512

_POLL_SECONDS = 0.2

Address = tuple[str, int]


def make_server_address(host: str, port: Union[str, int]) -> Address:
    """Validate ``host`` as a dotted IPv4 address and ``port`` as a UDP port."""
    try:
        packed = socket.inet_aton(host)
    except (OSError, TypeError, UnicodeError):
        raise ValueError(f"invalid server_ip {host!r}") from None
    try:
        number = int(port)
    except (TypeError, ValueError):
        raise ValueError(f"invalid server port {port!r}") from None
    if not 0 <= number <= 0xFFFF:
        raise ValueError(f"server port {number} out of range")
    return socket.inet_ntoa(packed), number


def _split_command_bytes(data: bytes) -> list[bytes]:
    """Cut ``data`` into pieces a single command buffer can hold."""
    return [data[start:start + COMMAND_MAX] for start in range(0, len(data), COMMAND_MAX)]


class UdpClient:
    """A UDP socket bound to one debug server."""

    def __init__(self, server_address: Address, sock: Optional[socket.socket] = None) -> None:
        self.server_address = server_address
        self._sock = sock if sock is not None else socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._send_lock = threading.Lock()

    def __enter__(self) -> "UdpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._sock.close()

    def register(self) -> int:
        """Tell the server to send its debug output to this client."""
        with self._send_lock:
            return self._sock.sendto(REGISTER_MESSAGE, self.server_address)

    def send_command(self, command: Union[str, bytes]) -> int:
        """Send one command in a fixed-size, zero-padded buffer."""
        payload = command.encode() if isinstance(command, str) else bytes(command)
        if len(payload) > COMMAND_MAX:
            raise ValueError(f"command longer than {COMMAND_MAX} bytes")
        packet = payload.ljust(COMMAND_BUFFER_SIZE, b"\0")
        with self._send_lock:
            return self._sock.sendto(packet, self.server_address)

    def receive(self) -> str:
        """Wait for one datagram; later commands go to whoever sent it."""
        data, address = self._sock.recvfrom(RECV_BUFFER_SIZE)
        self.server_address = address
        return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")

    def run(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        """Forward lines from ``stdin`` and echo replies to ``stdout``.

        Returns when ``stdin`` is exhausted, once replies already waiting
        on the socket have been printed.
        """
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        stop = threading.Event()
        write_lock = threading.Lock()

        def write(text: str) -> None:
            with write_lock:
                stdout.write(text)
                stdout.flush()

        def receive_loop() -> None:
            while True:
                try:
                    text = self.receive()
                except socket.timeout:
                    if stop.is_set():
                        return
                    continue
                except OSError:
                    return
                if text:
                    write(f"Recv:{text}\r\n")

        previous_timeout = self._sock.gettimeout()
        self._sock.settimeout(_POLL_SECONDS)
        receiver = threading.Thread(target=receive_loop, daemon=True)
        receiver.start()
        try:
            for line in stdin:
                for piece in _split_command_bytes(line.encode()):
                    write(f"Command :{piece.decode('utf-8', errors='replace')}\r\n")
                    self.send_command(piece)
        finally:
            stop.set()
            receiver.join()
            self._sock.settimeout(previous_timeout)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command entry point: ``<server addr> <server port>``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "udp_client"
        print(f"Usage: {program} <server addr> <server port>\r")
        return 1
    try:
        address = make_server_address(args[0], args[1])
    except ValueError:
        print("invalid server_ip")
        return 1
    try:
        client = UdpClient(address)
    except OSError as exc:
        print(f"socket: {exc}", file=sys.stderr)
        return 1
    with client:
        try:
            client.register()
            client.run()
        except OSError as exc:
            print(f"sendto: {exc}", file=sys.stderr)
            return 1
    return 0