"""TCP registration server delivering responses and UDP notifications."""

from __future__ import annotations

import argparse
import asyncio
import logging
import threading
from typing import Any, Optional

from .channel import BUFFER_SIZE, Channel
from .commands import CommandError
from .executor import CommandExecutor, Outcome
from .notices import Datagram
from .responses import status_response

log = logging.getLogger(__name__)

UDP_SENDER_PORT = 30001
DEFAULT_BACKLOG = 128


class RegistrationServer:
    """Accepts client connections and runs their requests."""

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        udp_host: str = "0.0.0.0",
        udp_port: int = UDP_SENDER_PORT,
    ) -> None:
        self.executor = executor if executor is not None else CommandExecutor()
        self.udp_host = udp_host
        self.udp_port = udp_port
        self.terminated = False
        self.active = 0
        self.address: Optional[tuple] = None
        self.ready = threading.Event()
        self._udp: Optional[asyncio.DatagramTransport] = None
        self._done: Optional[asyncio.Event] = None

    @property
    def finished(self) -> bool:
        """True once stop was requested and no connection is left."""
        return self.terminated and self.active == 0

    def open_channel(self, peer_host: str) -> Channel:
        """Start a connection from ``peer_host``; refused once stopping."""
        if self.terminated:
            raise ConnectionRefusedError("server is stopping")
        self.active += 1
        log.debug("start connection with new client!")
        return Channel(self.executor.repository, peer_host)

    def handle_data(self, channel: Channel, data: Any) -> list[Outcome]:
        """Feed received data to ``channel`` and run every request it completes."""
        outcomes = []
        for request in channel.feed(data):
            if isinstance(request, CommandError):
                outcomes.append(Outcome(status_response(request.status)))
                continue
            outcome = self.executor.execute(request, channel, channel.peer_host)
            if outcome.stop:
                self.terminated = True
            outcomes.append(outcome)
        return outcomes

    def close_channel(self, channel: Channel) -> list[Datagram]:
        """End a connection; return the notifications its closing causes."""
        log.debug("close handle %r", channel)
        datagrams = self.executor.close_channel(channel)
        self.active = max(0, self.active - 1)
        if self._done is not None and self.finished:
            self._done.set()
        return datagrams

    def serve(self, host: str, port: int) -> None:
        """Listen on ``host``:``port`` until stopped and every client has gone."""
        asyncio.run(self._serve(host, port))

    async def _serve(self, host: str, port: int) -> None:
        loop = asyncio.get_running_loop()
        self._done = asyncio.Event()
        self._udp, _ = await loop.create_datagram_endpoint(
            asyncio.DatagramProtocol, local_addr=(self.udp_host, self.udp_port)
        )
        try:
            server = await asyncio.start_server(
                self._client, host, port, backlog=DEFAULT_BACKLOG
            )
            async with server:
                self.address = server.sockets[0].getsockname()
                print(f"start server listening on port {self.address[1]}...")
                self.ready.set()
                await self._done.wait()
        finally:
            self._udp.close()
            self._udp = None
            self.executor.repository.clear()
        print("Server terminated!")

    def _send(self, datagrams: list[Datagram]) -> bool:
        if self._udp is None:
            return not datagrams
        try:
            for datagram in datagrams:
                self._udp.sendto(datagram.payload, datagram.address)
        except (OSError, ValueError, TypeError) as error:
            log.debug("datagram not sent: %s", error)
            return False
        return True

    async def _deliver(self, outcome: Outcome, writer: asyncio.StreamWriter) -> None:
        response = outcome.response
        if not self._send(outcome.datagrams) and outcome.failure_response is not None:
            response = outcome.failure_response
        if response is not None:
            writer.write(response.encode("utf-8"))
            await writer.drain()

    async def _client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        host = peer[0] if peer else ""
        try:
            channel = self.open_channel(host)
        except ConnectionRefusedError:
            writer.close()
            return
        try:
            while True:
                data = await reader.read(BUFFER_SIZE)
                if not data:
                    break
                for outcome in self.handle_data(channel, data):
                    await self._deliver(outcome, writer)
        except (ConnectionError, OSError) as error:
            log.debug("connection error %s", error)
        finally:
            self._send(self.close_channel(channel))
            writer.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the registration server from the command line."""
    parser = argparse.ArgumentParser(prog="topicreg", description="Topic registration server")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debugging detail")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, required=True, help="TCP port to listen on")
    args = parser.parse_args(argv)
    if args.verbose:
        print("verbose_mode!")
        logging.basicConfig(level=logging.DEBUG)
    try:
        RegistrationServer().serve(args.host, args.port)
    except OSError as error:
        print(f"Listen error {error}")
        return 1
    return 0