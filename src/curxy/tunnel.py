"""Public Cloudflare quick tunnel via the cloudflared binary."""

import logging
import re
import shutil
import subprocess
import threading

logger = logging.getLogger(__name__)

TUNNEL_URL_PATTERN = re.compile(r"https://[a-z0-9-]+\.trycloudflare\.com")


class TunnelError(Exception):
    """Raised when the tunnel cannot be started."""

    pass


def extract_tunnel_url(line: str) -> str | None:
    """Return the trycloudflare URL in a cloudflared log line, if any."""
    match = TUNNEL_URL_PATTERN.search(line)
    return match.group(0) if match else None


def format_banner(url: str) -> str:
    """Instructions printed once the public URL is known."""
    return (
        f"Server running at: {url}\n"
        f"enter {url}/v1 into Override OpenAI Base URL section in cursor settings"
    )


class CloudflaredTunnel:
    """A cloudflared quick tunnel forwarding to the local proxy."""

    def __init__(self, host: str, port: int, binary: str = "cloudflared"):
        self.host = host
        self.port = port
        self.binary = binary
        self.url: str | None = None
        self._process: subprocess.Popen | None = None

    def start(self) -> None:
        """
        Launch cloudflared and watch its output for the public URL.

        Raises:
            TunnelError: If cloudflared is not installed.
        """
        executable = shutil.which(self.binary)
        if executable is None:
            raise TunnelError(
                f"'{self.binary}' binary not found on PATH. Download it from "
                "https://developers.cloudflare.com/cloudflare-one/connections/connect-networks/downloads/"
            )

        logger.info("Starting Cloudflare quick tunnel...")
        self._process = subprocess.Popen(
            [executable, "tunnel", "--url", f"http://{self.host}:{self.port}"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )
        threading.Thread(target=self._watch_output, daemon=True).start()

    def _watch_output(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        for line in self._process.stderr:
            if self.url is None:
                url = extract_tunnel_url(line)
                if url:
                    self.url = url
                    print(format_banner(url), flush=True)
            logger.debug(f"cloudflared: {line.rstrip()}")

        if self.url is None:
            logger.warning("cloudflared exited before reporting a tunnel URL")

    def stop(self) -> None:
        """Terminate cloudflared."""
        if self._process is None or self._process.poll() is not None:
            return

        logger.info("Stopping Cloudflare tunnel")
        self._process.terminate()
        try:
            self._process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self._process.kill()
