# Mock ControlByWeb module for testing
import socket
import threading
import time
import logging

logger = logging.getLogger(__name__)

REQUEST_END = b"\r\n\r\n"


class MockDeviceServer:
    """
    Minimal stand-in for a ControlByWeb module.

    Accepts one command per connection, records it, replies with the
    canned bytes registered for the requested page and closes the socket.
    Commands carrying noReply=1 get no reply at all.

    Example:
        server = MockDeviceServer()
        server.set_page("state.xml", b"<datavalues>...</datavalues>")
        server.start()
        ...
        server.stop()
    """

    def __init__(self, host='127.0.0.1', port=0, padding=16):
        self.host = host
        self.port = port
        self.padding = padding
        self.running = False
        self.commands = []
        self.pages = {}
        self.force_response = None
        self._server = None
        self._thread = None
        self._lock = threading.Lock()

    def set_page(self, page, body):
        """Register the XML body served for a page such as 'state.xml'."""
        self.pages[page] = body if isinstance(body, bytes) else body.encode('ascii')

    def start(self):
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind((self.host, self.port))
        self._server.listen(5)
        self._server.settimeout(0.2)
        self.port = self._server.getsockname()[1]
        self.running = True
        self._thread = threading.Thread(target=self._serve, name="MockDeviceServer", daemon=True)
        self._thread.start()
        logger.info(f"Mock device server started on {self.host}:{self.port}")

    def stop(self):
        self.running = False
        if self._thread:
            self._thread.join(2.0)
        if self._server:
            self._server.close()
        logger.info("Mock device server stopped")

    def received(self):
        with self._lock:
            return list(self.commands)

    def _serve(self):
        while self.running:
            try:
                client, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with client:
                try:
                    self._handle(client)
                except OSError as e:
                    logger.debug(f"Client error: {e}")

    def _read_command(self, client):
        data = b""
        client.settimeout(2.0)
        while not data.endswith(REQUEST_END):
            chunk = client.recv(4096)
            if not chunk:
                return data
            data += chunk
        # An Authorization header may follow the request line.
        client.settimeout(0.05)
        try:
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                data += chunk
        except socket.timeout:
            pass
        return data

    def _handle(self, client):
        command = self._read_command(client).decode('ascii')
        with self._lock:
            self.commands.append(command)

        if self.force_response is not None:
            client.sendall(self.force_response)
            return
        if "noReply=1" in command:
            return

        page = command.split(" ")[1].lstrip("/").split("?")[0] if " " in command else ""
        body = self.pages.get(page)
        if body is not None:
            client.sendall(body + b"\0" * self.padding)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    server = MockDeviceServer(port=8080)
    server.set_page("state.xml", "<datavalues><relaystate>0</relaystate><inputstate>0</inputstate></datavalues>")
    server.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        server.stop()
