from __future__ import annotations


class SimulationError(Exception):
    """Base class for failures raised by the simulation core."""


class GenerationError(SimulationError):
    """The random source could not produce an in-range value within the retry budget."""


class SchedulingError(SimulationError):
    """Work remains but no process can ever become eligible."""
