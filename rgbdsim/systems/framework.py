"""Minimal pull-based port layer.

Systems declare named input and output ports. Output values are computed on
every ``eval``; nothing is cached here. Time, input sources and discrete state
live in a :class:`Context`, so one system can be evaluated against several
contexts.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..core.utils import get_logger

_log = get_logger()

InputSource = Callable[["Context"], Any]

_system_ids = itertools.count()


@dataclass
class Context:
    time: float = 0.0
    _fixed: Dict[str, Any] = field(default_factory=dict, repr=False)
    _sources: Dict[str, InputSource] = field(default_factory=dict, repr=False)
    state: Dict[str, Any] = field(default_factory=dict, repr=False)

    def fix_input(self, name: str, value: Any) -> None:
        """Bind input ``name`` to a constant value."""
        self._sources.pop(name, None)
        self._fixed[name] = value

    def connect_input(self, name: str, source: InputSource) -> None:
        """Bind input ``name`` to ``source(context)``, evaluated on each read."""
        self._fixed.pop(name, None)
        self._sources[name] = source

    def has_input(self, name: str) -> bool:
        return name in self._fixed or name in self._sources

    def get_input(self, name: str) -> Any:
        if name in self._fixed:
            return self._fixed[name]
        source = self._sources.get(name)
        if source is None:
            raise RuntimeError(f"Input port '{name}' is not connected")
        return source(self)


@dataclass(eq=False)
class InputPort:
    name: str

    def eval(self, context: Context) -> Any:
        return context.get_input(self.name)

    def fix_value(self, context: Context, value: Any) -> None:
        context.fix_input(self.name, value)


@dataclass(eq=False)
class OutputPort:
    """Output whose value is allocated from ``allocator`` and filled by ``calc``."""

    name: str
    allocator: Callable[[], Any]
    calc: Callable[[Context, Any], None]

    def allocate(self) -> Any:
        return self.allocator()

    def eval(self, context: Context) -> Any:
        value = self.allocator()
        self.calc(context, value)
        return value


class System:
    """Named collection of input and output ports."""

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or type(self).__name__
        # Names may repeat, so context state is keyed by a per-instance id.
        self._state_prefix = f"{self.name}#{next(_system_ids)}"
        self._input_ports: Dict[str, InputPort] = {}
        self._output_ports: Dict[str, OutputPort] = {}

    # -- declaration --
    def declare_input_port(self, name: str) -> InputPort:
        return self.export_input(InputPort(name))

    def declare_output_port(
        self, name: str, allocator: Callable[[], Any], calc: Callable[[Context, Any], None]
    ) -> OutputPort:
        return self.export_output(OutputPort(name, allocator, calc), name)

    def export_input(self, port: InputPort) -> InputPort:
        # Input values are keyed by port name in the context, so exports keep the name.
        if port.name in self._input_ports:
            raise ValueError(f"{self.name} already has an input port named '{port.name}'")
        self._input_ports[port.name] = port
        return port

    def export_output(self, port: OutputPort, name: str) -> OutputPort:
        if name in self._output_ports:
            raise ValueError(f"{self.name} already has an output port named '{name}'")
        if port.name != name:
            port = OutputPort(name, port.allocator, port.calc)
        self._output_ports[name] = port
        _log.debug("%s: exported output '%s'", self.name, name)
        return port

    def state_key(self, suffix: str) -> str:
        """Key under which this instance keeps ``suffix`` in ``Context.state``."""
        return f"{self._state_prefix}/{suffix}"

    # -- lookup --
    def num_input_ports(self) -> int:
        return len(self._input_ports)

    def num_output_ports(self) -> int:
        return len(self._output_ports)

    def input_port_names(self) -> List[str]:
        return list(self._input_ports)

    def output_port_names(self) -> List[str]:
        return list(self._output_ports)

    def has_output_port(self, name: str) -> bool:
        return name in self._output_ports

    def get_input_port(self, name: str) -> InputPort:
        try:
            return self._input_ports[name]
        except KeyError:
            raise KeyError(f"{self.name} has no input port named '{name}'") from None

    def get_output_port(self, name: str) -> OutputPort:
        try:
            return self._output_ports[name]
        except KeyError:
            raise KeyError(f"{self.name} has no output port named '{name}'") from None

    def create_default_context(self) -> Context:
        return Context()
