"""Plugin Runtime - JSON-RPC lifecycle for payload plugin processes

The PayloadPlugin owns everything process-wide for one plugin instance:

- Descriptor validation at construction (a malformed payloadName is fatal)
- The uptime clock read by the `healthCheck` built-in
- The stdin read loop, one line fully handled before the next is read
- stdout, written one complete response line at a time
- Shutdown on stdin EOF or on SIGTERM/SIGINT

# Lifecycle

```
STARTING --serve()--> READY --stdin EOF--------------------> STOPPED
                          \\--signal--> SHUTTING_DOWN ------> STOPPED
```

Both shutdown triggers end with exit status 0. A signal does not wait for an
in-flight handler.

# Example

```python
from payloadsdk import PayloadMetadata, PayloadPluginConfig, PayloadPlugin

async def sensor(params):
    return {"payload": params["sensors"], "contentType": "application/json"}

plugin = PayloadPluginConfig(
    metadata=PayloadMetadata("acme.echo", "Echo", "Echo sensors", "Data", "E"),
    handlers={"sensor": sensor},
)

# Normally started by payloadsdk.rpc_host
PayloadPlugin(plugin).run()
```
"""

import asyncio
import io
import os
import signal
import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from payloadsdk import diagnostics
from payloadsdk.manifest import ManifestError, PayloadMetadata, descriptor_dict, validate_payload_name
from payloadsdk.rpc.codec import FALLBACK_ID, Response, encode
from payloadsdk.rpc.dispatcher import Dispatcher
from payloadsdk.rpc.errors import ErrorCode, ErrorObject
from payloadsdk.rpc.registry import GET_METADATA, HEALTH_CHECK, Handler, MethodRegistry

# Longest accepted request line, including the newline
MAX_LINE_BYTES = 16 * 1024 * 1024

_READ_CHUNK = 64 * 1024


class PluginRuntimeError(Exception):
    """Errors that can occur in the plugin runtime"""
    pass


class PluginConfigError(PluginRuntimeError):
    """Plugin config object is missing or malformed"""
    pass


class LifecycleState(Enum):
    STARTING = "starting"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


@dataclass
class PayloadPluginConfig:
    """What a plugin module exports: its descriptor and its handler map.

    Handlers named in `metadata.messageTypes` are called by the host on their
    trigger. Utility handlers (getOutputSchema, validate) live in the same
    map but are not declared as message types.
    """
    metadata: Union[PayloadMetadata, Dict[str, Any]]
    handlers: Dict[str, Handler] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: Any) -> "PayloadPluginConfig":
        """Accept a PayloadPluginConfig or a mapping with `metadata` and `handlers`"""
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, Mapping) and obj.get("metadata"):
            return cls(metadata=obj["metadata"], handlers=dict(obj.get("handlers") or {}))
        raise PluginConfigError("Plugin config has no metadata")


class PayloadPlugin:
    """The JSON-RPC runtime for one plugin instance.

    Construct it with the plugin's config, then call `run()` (or await
    `serve()`) to answer requests until stdin closes or a termination signal
    arrives.
    """

    def __init__(self, config: Any, clock: Callable[[], float] = time.monotonic):
        """Validate the descriptor and build the method registry.

        Raises:
            PluginConfigError: If the config has no usable metadata
            InvalidPayloadNameError: If payloadName is not namespaced dot-notation
            RegistryError: If a handler name is invalid or shadows a built-in
        """
        config = PayloadPluginConfig.from_object(config)
        try:
            self.metadata = descriptor_dict(config.metadata)
        except ManifestError as e:
            raise PluginConfigError(str(e))

        validate_payload_name(self.metadata.get("payloadName"))

        self._clock = clock
        self._start_time = clock()
        self._state = LifecycleState.STARTING
        self._serve_task: Optional[asyncio.Task] = None

        self.registry = MethodRegistry(
            {GET_METADATA: self._get_metadata, HEALTH_CHECK: self._health_check},
            config.handlers,
        )
        self.dispatcher = Dispatcher(self.registry)
        self._warn_undeclared_handlers()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def display_name(self) -> str:
        return self.metadata.get("displayName") or self.metadata["payloadName"]

    def uptime(self) -> int:
        """Whole seconds since construction"""
        return max(0, int(self._clock() - self._start_time))

    async def _get_metadata(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.metadata

    async def _health_check(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"healthy": True, "uptime": self.uptime()}

    def _warn_undeclared_handlers(self) -> None:
        message_types = self.metadata.get("messageTypes")
        if not isinstance(message_types, Mapping):
            return
        for name in message_types:
            if name not in self.registry:
                diagnostics.log(f"messageTypes declares '{name}' but no handler is registered")

    def run(self) -> int:
        """Serve stdin/stdout on a fresh event loop and return the exit status"""
        return asyncio.run(self._serve_with_signals())

    async def _serve_with_signals(self, reader=None, writer=None) -> int:
        installed, previous = self._install_signal_handlers()
        try:
            return await self.serve(reader, writer)
        finally:
            loop = asyncio.get_running_loop()
            for sig in installed:
                loop.remove_signal_handler(sig)
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def _install_signal_handlers(self):
        """Route SIGTERM/SIGINT to request_shutdown.

        Returns the signals installed on the loop, and the prior handlers of
        signals installed with signal.signal instead.
        """
        loop = asyncio.get_running_loop()
        installed = []
        previous = {}
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
                installed.append(sig)
            except NotImplementedError:
                # No loop signal support (Windows): fall back to a plain handler
                prior = signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        self.request_shutdown, signal.Signals(signum).name
                    ),
                )
                if prior is not None:
                    previous[sig] = prior
        return installed, previous

    def request_shutdown(self, reason: str = "shutdown") -> None:
        """Stop serving immediately, without draining the in-flight handler.

        Called for SIGTERM/SIGINT; safe to call more than once.
        """
        if self._state in (LifecycleState.SHUTTING_DOWN, LifecycleState.STOPPED):
            return
        diagnostics.log(f"{reason} received, shutting down")
        self._state = LifecycleState.SHUTTING_DOWN
        if self._serve_task is not None and not self._serve_task.done():
            self._serve_task.cancel()

    async def serve(self, reader=None, writer=None) -> int:
        """Answer request lines until input closes or shutdown is requested.

        Args:
            reader: asyncio.StreamReader carrying request lines. Defaults to
                one fed from stdin.
            writer: Binary (or text) stream for response lines. Defaults to
                stdout.

        Returns:
            The process exit status (0)
        """
        if self._state is LifecycleState.SHUTTING_DOWN:
            self._state = LifecycleState.STOPPED
            return 0
        if self._state is not LifecycleState.STARTING:
            raise PluginRuntimeError(f"Cannot serve from state {self._state.value}")

        if reader is None:
            reader = _stdin_reader()
        if writer is None:
            writer = sys.stdout.buffer

        self._serve_task = asyncio.current_task()
        self._state = LifecycleState.READY
        diagnostics.log(f"{self.display_name} ready")

        try:
            await self._read_loop(reader, writer)
        except asyncio.CancelledError:
            if self._state is not LifecycleState.SHUTTING_DOWN:
                raise
        finally:
            self._serve_task = None

        self._state = LifecycleState.STOPPED
        return 0

    async def _read_loop(self, reader, writer) -> None:
        while True:
            line = await _next_line(reader)
            if line is None:
                diagnostics.log("Discarded request line over the maximum length")
                _write_line(writer, encode(Response.failure(
                    FALLBACK_ID,
                    ErrorObject(int(ErrorCode.PARSE_ERROR), "Parse error", "line exceeds maximum length"),
                )))
                continue

            if not line:
                diagnostics.log("stdin closed, shutting down")
                self._state = LifecycleState.SHUTTING_DOWN
                return

            try:
                _write_line(writer, await self.dispatcher.dispatch_line(line))
            except Exception as e:
                diagnostics.log(f"Unhandled error: {e}")


async def _next_line(reader: asyncio.StreamReader) -> Optional[bytes]:
    """Read one newline-terminated line.

    Returns b"" at EOF, the unterminated tail if input ends mid-line, and
    None for a line over the reader's limit. An over-long line is consumed
    through its newline, however many chunks it arrives in.
    """
    try:
        return await reader.readuntil(b"\n")
    except asyncio.IncompleteReadError as e:
        return e.partial
    except asyncio.LimitOverrunError as e:
        await _discard_line(reader, e.consumed)
        return None


async def _discard_line(reader: asyncio.StreamReader, consumed: int) -> None:
    # On overrun the buffer is left intact; `consumed` bytes of it belong to this line
    while True:
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.IncompleteReadError:
            return
        except asyncio.LimitOverrunError as e:
            consumed = e.consumed


def _write_line(writer, line: str) -> None:
    if isinstance(writer, io.TextIOBase):
        writer.write(line)
    else:
        writer.write(line.encode("utf-8"))
    writer.flush()


def _stdin_reader() -> asyncio.StreamReader:
    """StreamReader fed from fd 0 by a daemon thread.

    The thread reads the raw descriptor so it never holds the sys.stdin
    buffer lock at interpreter shutdown.
    """
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    fd = sys.stdin.fileno()

    def post(callback, *args) -> bool:
        try:
            loop.call_soon_threadsafe(callback, *args)
            return True
        except RuntimeError:
            # Loop already closed
            return False

    def pump() -> None:
        try:
            while True:
                chunk = os.read(fd, _READ_CHUNK)
                if not chunk or not post(reader.feed_data, chunk):
                    break
        except OSError as e:
            post(diagnostics.log, f"stdin read error: {e}")
        finally:
            post(reader.feed_eof)

    threading.Thread(target=pump, name="payload-stdin", daemon=True).start()
    return reader
