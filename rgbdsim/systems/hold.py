from __future__ import annotations

import math
import sys
from typing import Any, Callable, Optional

from .framework import Context, OutputPort, System

# Relative slack, a few ulps, for times that land on k * period after rounding.
SAMPLE_TIME_REL_TOL = 4 * sys.float_info.epsilon


def latest_sample_index(time: float, period_s: float) -> int:
    """Index k of the last sample instant k * period_s at or before ``time``."""
    k = int(math.floor(time / period_s))
    if math.isclose((k + 1) * period_s, time, rel_tol=SAMPLE_TIME_REL_TOL):
        return k + 1
    return k


class ZeroOrderHold(System):
    """Holds the last stored value of one upstream output.

    The owner decides when to sample: :meth:`sample` evaluates the source and
    :meth:`store` replaces the held value in ``context.state``. Until the
    first value is stored the output is a fresh ``model_factory()`` value.
    """

    def __init__(
        self,
        model_factory: Callable[[], Any],
        source: OutputPort,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name or f"hold_{source.name}")
        self.model_factory = model_factory
        self.source = source
        self._held_key = self.state_key("held")
        self.output = self.declare_output_port("y", model_factory, self._calc_output)

    def sample(self, context: Context) -> Any:
        """Evaluate the upstream output at ``context.time`` without storing it."""
        return self.source.eval(context)

    def store(self, context: Context, value: Any) -> None:
        context.state[self._held_key] = value

    def held_value(self, context: Context) -> Any:
        held = context.state.get(self._held_key)
        if held is None:
            return self.model_factory()
        return held

    def _calc_output(self, context: Context, out: Any) -> None:
        out.copy_from(self.held_value(context))
