"""Output renderers and the renderer registry.

Four formats are available:

* ``json``: the resource mapping, optionally indented.
* ``yaml``: the same mapping as block-style YAML.
* ``name``: one ``<kind>/<name> [operation]`` line per object.
* ``table``: a borderless Rich table.

New formats are added by registering a factory with a
:class:`RendererRegistry`.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, Protocol, TextIO

import yaml
from rich.console import Console
from rich.table import Table

from dpservice_cli.cli.tables import DEFAULT_TABLE_CONVERTER, TableConverter
from dpservice_cli.config import OUTPUT_FORMATS
from dpservice_cli.core.models import Resource, ResourceList
from dpservice_cli.exceptions import RendererError


class Renderer(Protocol):
    def render(self, value: Any) -> None:
        ...  # pragma: no cover


def _as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, (Resource, ResourceList)):
        return value.to_dict()
    raise RendererError(f"Unsupported type {type(value).__name__}")


def _objects(value: Any) -> tuple[Resource, ...]:
    if isinstance(value, Resource):
        return (value,)
    if isinstance(value, ResourceList):
        return value.items
    raise RendererError(f"Unsupported type {type(value).__name__}")


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

class JsonRenderer:
    def __init__(self, stream: TextIO, pretty: bool = False) -> None:
        self._stream = stream
        self._pretty = pretty

    def render(self, value: Any) -> None:
        indent = 2 if self._pretty else None
        self._stream.write(json.dumps(_as_dict(value), indent=indent) + "\n")


class YamlRenderer:
    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def render(self, value: Any) -> None:
        yaml.safe_dump(
            _as_dict(value),
            self._stream,
            sort_keys=False,
            default_flow_style=False,
        )


class NameRenderer:
    """Prints ``<kind>/<name>`` per object, followed by *operation* if set."""

    def __init__(self, stream: TextIO, operation: str = "") -> None:
        self._stream = stream
        self._operation = operation

    def render(self, value: Any) -> None:
        for obj in _objects(value):
            parts = [f"{obj.kind.lower()}/{obj.name}" if obj.kind else obj.name]
            if self._operation:
                parts.append(self._operation)
            self._stream.write(" ".join(parts) + "\n")


class TableRenderer:
    def __init__(
        self,
        stream: TextIO,
        converter: TableConverter = DEFAULT_TABLE_CONVERTER,
    ) -> None:
        self._stream = stream
        self._converter = converter

    def render(self, value: Any) -> None:
        data = self._converter.convert(value)

        table = Table(box=None, show_edge=False, header_style="bold")
        for header in data.headers:
            table.add_column(header)
        for row in data.rows:
            table.add_row(*row)

        Console(file=self._stream, highlight=False).print(table)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

RendererFactory = Callable[[TextIO], Renderer]


class RendererRegistry:
    """Maps output-format names to renderer factories."""

    def __init__(self) -> None:
        self._factories: dict[str, RendererFactory] = {}

    def register(self, name: str, factory: RendererFactory) -> None:
        if name in self._factories:
            raise RendererError(f"Renderer {name!r} is already registered")
        self._factories[name] = factory

    def new(self, name: str, stream: TextIO) -> Renderer:
        factory = self._factories.get(name)
        if factory is None:
            raise RendererError(
                f"Unknown renderer {name!r}",
                hint=f"Choose one of: {', '.join(self._factories)}",
            )
        return factory(stream)

    def names(self) -> tuple[str, ...]:
        return tuple(self._factories)


def default_registry(*, pretty: bool = False, operation: str = "") -> RendererRegistry:
    """Build a registry with the four built-in formats."""
    registry = RendererRegistry()
    registry.register("json", lambda stream: JsonRenderer(stream, pretty=pretty))
    registry.register("yaml", YamlRenderer)
    registry.register("name", lambda stream: NameRenderer(stream, operation=operation))
    registry.register("table", TableRenderer)
    return registry
