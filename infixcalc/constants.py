import math
from types import MappingProxyType
from typing import Mapping

BUILTIN_CONSTANTS: Mapping[str, float] = MappingProxyType(
    {
        "pi": math.pi,
        "e": math.e,
    }
)
