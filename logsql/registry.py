from typing import Any, Callable, Mapping, Union

from logsql.options import SinkOptions
from logsql.sink import SqlSink

SinkFactory = Callable[[Union[SinkOptions, Mapping[str, Any]]], Any]


class SinkRegistry:
    """Sinks by name, so the logging setup of an application can pick one from its configuration."""

    def __init__(self) -> None:
        self._factories: dict[str, SinkFactory] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def names(self) -> list[str]:
        return sorted(self._factories)

    def register(self, name: str, factory: SinkFactory) -> None:
        if name in self._factories:
            raise ValueError(f"A sink named {name!r} is already registered")
        self._factories[name] = factory

    def create(self, name: str, options: Union[SinkOptions, Mapping[str, Any]]) -> Any:
        try:
            factory = self._factories[name]
        except KeyError:
            raise KeyError(f"No sink named {name!r}, known sinks: {', '.join(self.names())}") from None
        return factory(options)


def default_registry() -> SinkRegistry:
    registry = SinkRegistry()
    registry.register(SqlSink.NAME, SqlSink)
    return registry
