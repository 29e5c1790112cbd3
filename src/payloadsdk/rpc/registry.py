"""Method registry

A fixed mapping from method name to handler, built once at plugin startup
from the protocol built-ins and the plugin author's handler map. Names are
matched exactly; there is no registration after construction.
"""

from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Union

# Built-in methods answered by the SDK, never by plugin authors
GET_METADATA = "getMetadata"
HEALTH_CHECK = "healthCheck"
BUILTIN_METHODS = (GET_METADATA, HEALTH_CHECK)

Params = Dict[str, Any]
Handler = Callable[[Params], Union[Any, Awaitable[Any]]]


class RegistryError(Exception):
    """Invalid method registration"""
    pass


class DuplicateMethodError(RegistryError):
    """Method name registered twice"""

    def __init__(self, name: str):
        super().__init__(f"Method '{name}' is already registered")
        self.name = name


def _check_entry(name: Any, handler: Any) -> None:
    if not isinstance(name, str) or not name:
        raise RegistryError(f"Method names must be non-empty strings, got {name!r}")
    if not callable(handler):
        raise RegistryError(f"Handler for '{name}' is not callable")


class MethodRegistry:
    """Immutable name -> handler mapping for one plugin instance"""

    def __init__(self, builtins: Mapping[str, Handler], handlers: Optional[Mapping[str, Handler]] = None):
        methods: Dict[str, Handler] = {}
        for name, handler in builtins.items():
            _check_entry(name, handler)
            methods[name] = handler

        for name, handler in (handlers or {}).items():
            _check_entry(name, handler)
            if name in methods:
                raise DuplicateMethodError(name)
            methods[name] = handler

        self._methods = MappingProxyType(methods)
        self._builtin_names = frozenset(builtins)

    def get(self, name: Any) -> Optional[Handler]:
        """Resolve a method by exact name. Returns None if unknown."""
        if not isinstance(name, str):
            return None
        return self._methods.get(name)

    def is_builtin(self, name: str) -> bool:
        return name in self._builtin_names

    def names(self):
        return list(self._methods)

    @property
    def methods(self) -> Mapping[str, Handler]:
        return self._methods

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)
