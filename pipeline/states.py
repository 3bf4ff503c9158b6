"""Secondary-structure alphabets and the 8-state to 3-state reduction."""
from __future__ import annotations

from typing import Dict, Tuple

STATE8_ORDER: Tuple[str, ...] = ("H", "G", "I", "E", "B", "T", "S", "C")
STATE3_ORDER: Tuple[str, ...] = ("H", "E", "C")

STATE_NAMES: Dict[str, str] = {
    "H": "α-helix",
    "G": "3₁₀-helix",
    "I": "π-helix",
    "E": "β-strand",
    "B": "β-bridge",
    "T": "turn",
    "S": "bend",
    "C": "coil",
}

STATE3_NAMES: Dict[str, str] = {
    "H": "helix",
    "E": "strand",
    "C": "coil",
}

_HELIX_FAMILY = frozenset("HGI")
_STRAND_FAMILY = frozenset("EB")


def reduce_state(state8: str) -> str:
    """Map an 8-state DSSP-style label to its 3-state family.

    Unknown symbols fall into the coil family.
    """

    if state8 in _HELIX_FAMILY:
        return "H"
    if state8 in _STRAND_FAMILY:
        return "E"
    return "C"


def state_legend(mode: str = "8") -> Dict[str, str]:
    """Return the ordered symbol -> name legend for the requested alphabet."""

    if mode == "3":
        return {symbol: STATE3_NAMES[symbol] for symbol in STATE3_ORDER}
    return {symbol: STATE_NAMES[symbol] for symbol in STATE8_ORDER}


__all__ = ["STATE3_NAMES", "STATE3_ORDER", "STATE8_ORDER", "STATE_NAMES", "reduce_state", "state_legend"]
