"""State/store layer.

Single source of truth for how parameter observations from the cloud hub
record and from the P2P session are merged into a station's parameter set.
"""

from pystation.state.decode import read_value
from pystation.state.parameters import ParameterSet, ParameterStore, ParameterValue

__all__ = ["ParameterSet", "ParameterStore", "ParameterValue", "read_value"]
