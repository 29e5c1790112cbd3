"""Async Plugin Host - host-side client for one payload plugin process

The AsyncPluginHost spawns a plugin through the rpc host entry point and
talks to it over its stdin/stdout:

- One request in flight at a time (calls are serialized)
- Responses matched to requests by identifier
- Error responses raised as PluginError
- Optional per-call timeout; a plugin that misses it is killed

Usage:
```python
import asyncio
from payloadsdk.plugin_host import AsyncPluginHost

async def main():
    async with await AsyncPluginHost.spawn("plugins/junctionrelay.raw-json") as host:
        print(await host.health_check())
        result = await host.call("sensor", {"sensors": {}, "config": {}, "context": {}})
```
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from payloadsdk.plugin_runtime import MAX_LINE_BYTES
from payloadsdk.protocol import JSONRPC_VERSION
from payloadsdk.rpc.codec import dumps, loads
from payloadsdk.rpc.errors import ErrorObject
from payloadsdk.rpc.registry import GET_METADATA, HEALTH_CHECK


class AsyncHostError(Exception):
    """Base error for async plugin host"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PluginError(AsyncHostError):
    """Plugin answered with an error response"""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.error_message = message
        self.data = data


class ProcessExited(AsyncHostError):
    """Plugin process exited unexpectedly"""

    def __init__(self):
        super().__init__("Plugin process exited unexpectedly")


class ProtocolViolation(AsyncHostError):
    """Plugin wrote something that is not the expected response line"""
    pass


class ResponseTimeout(AsyncHostError):
    """Plugin did not answer in time and was killed"""

    def __init__(self, method: str, timeout: float):
        super().__init__(f"No response to '{method}' within {timeout}s")
        self.method = method
        self.timeout = timeout


class Closed(AsyncHostError):
    """Host is closed"""

    def __init__(self):
        super().__init__("Host is closed")


class AsyncPluginHost:
    """Async host-side client for a payload plugin subprocess"""

    def __init__(self, process: asyncio.subprocess.Process):
        """Internal constructor - use spawn() instead"""
        self.process = process
        self._next_id = 0
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def spawn(
        cls,
        entry: Union[str, Path],
        python: Optional[str] = None,
        export: Optional[str] = None,
        stderr: Any = None,
    ) -> "AsyncPluginHost":
        """Start `python -m payloadsdk.rpc_host <entry>` with piped stdio.

        Args:
            entry: Plugin module file or plugin directory
            python: Interpreter to use (default: the current one)
            export: Module attribute holding the plugin config
            stderr: Where the plugin's diagnostics go (default: inherited)
        """
        args: List[str] = [python or sys.executable, "-m", "payloadsdk.rpc_host", str(entry)]
        if export is not None:
            args += ["--export", export]

        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=stderr,
            limit=MAX_LINE_BYTES,
        )
        return cls(process)

    async def __aenter__(self) -> "AsyncPluginHost":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.process.returncode is None:
            await self.close()

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        """Invoke a plugin method and return its result.

        Raises:
            PluginError: If the plugin answered with an error response
            ProcessExited: If the plugin exited before answering
            ResponseTimeout: If no answer arrived within `timeout` seconds
        """
        async with self._lock:
            self._next_id += 1
            request_id = self._next_id
            request = {
                "jsonrpc": JSONRPC_VERSION,
                "method": method,
                "params": params if params is not None else {},
                "id": request_id,
            }
            message = await self._exchange(dumps(request), method, timeout)

        if message.get("id") != request_id:
            raise ProtocolViolation(f"Expected response id {request_id}, got {message.get('id')!r}")
        if "error" in message:
            error = ErrorObject.from_dict(message["error"])
            raise PluginError(error.code, error.message, error.data)
        return message.get("result")

    async def send_raw(self, line: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Write one raw line and return the decoded response envelope"""
        async with self._lock:
            return await self._exchange(line, "<raw>", timeout)

    async def get_metadata(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        return await self.call(GET_METADATA, timeout=timeout)

    async def health_check(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        return await self.call(HEALTH_CHECK, timeout=timeout)

    async def _exchange(self, line: str, method: str, timeout: Optional[float]) -> Dict[str, Any]:
        if self._closed:
            raise Closed()

        stdin = self.process.stdin
        try:
            stdin.write(line.rstrip("\n").encode("utf-8") + b"\n")
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            raise ProcessExited()

        try:
            raw = await asyncio.wait_for(self.process.stdout.readline(), timeout)
        except asyncio.TimeoutError:
            await self.kill()
            raise ResponseTimeout(method, timeout)

        if not raw:
            raise ProcessExited()
        try:
            message = loads(raw.decode("utf-8"))
        except ValueError as e:
            raise ProtocolViolation(f"Malformed response line: {e}")
        if not isinstance(message, dict):
            raise ProtocolViolation("Response is not a JSON object")
        return message

    async def close(self) -> int:
        """Close the plugin's stdin and wait for it to exit"""
        self._closed = True
        stdin = self.process.stdin
        if not stdin.is_closing():
            stdin.close()
        try:
            await stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass
        return await self.process.wait()

    async def terminate(self) -> int:
        """Send SIGTERM and wait for the plugin to exit"""
        self._closed = True
        if self.process.returncode is None:
            self.process.terminate()
        return await self.process.wait()

    async def kill(self) -> int:
        self._closed = True
        if self.process.returncode is None:
            self.process.kill()
        return await self.process.wait()
