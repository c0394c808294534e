"""Bin payload extraction tolerant of the SDK's shifting field names.

Each concern (container list, bin id, X amount, Y amount, price) has an
ordered list of named-field probes. Probes are tried in priority order and
the first match wins; a payload none of them match yields no bins.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from src.dlmm_chain.domain.models import Bin
from src.dlmm_common.errors import BinDataShapeError

logger = logging.getLogger(__name__)

_NO_MATCH = object()


@dataclass(frozen=True)
class FieldProbe:
    """Looks up a (possibly nested) key path; returns _NO_MATCH when absent."""

    path: tuple[str, ...]

    @property
    def name(self) -> str:
        return ".".join(self.path)

    def probe(self, payload: Any) -> Any:
        value = payload
        for key in self.path:
            if not isinstance(value, Mapping) or key not in value or value[key] is None:
                return _NO_MATCH
            value = value[key]
        return value


def _probes(*names: str) -> tuple[FieldProbe, ...]:
    return tuple(FieldProbe(tuple(n.split("."))) for n in names)


CONTAINER_PROBES = _probes(
    "positionBinData",
    "bins",
    "binPositions",
    "positionData.positionBinData",
    "positionData.binPositions",
)
BIN_ID_PROBES = _probes("binId", "index")
X_AMOUNT_PROBES = _probes("positionXAmount", "xAmount", "binXAmount", "x")
Y_AMOUNT_PROBES = _probes("positionYAmount", "yAmount", "binYAmount", "y")
PRICE_PROBES = _probes("price", "rawPrice", "binPrice")


def first_match(probes: Sequence[FieldProbe], payload: Any) -> FieldProbe | None:
    """Return the first probe that matches ``payload``."""
    for probe in probes:
        if probe.probe(payload) is not _NO_MATCH:
            return probe
    return None


def _looks_like_bin_list(value: Any) -> bool:
    if not isinstance(value, list) or not value:
        return False
    sample = value[0]
    return (
        first_match(BIN_ID_PROBES, sample) is not None
        and first_match(X_AMOUNT_PROBES, sample) is not None
        and first_match(Y_AMOUNT_PROBES, sample) is not None
    )


def _find_bin_list(payload: Any) -> list[Any] | None:
    """Depth-first search for the first list shaped like bin entries."""
    if _looks_like_bin_list(payload):
        return payload
    children: Sequence[Any]
    if isinstance(payload, Mapping):
        children = list(payload.values())
    elif isinstance(payload, list):
        children = payload
    else:
        return None
    for child in children:
        found = _find_bin_list(child)
        if found is not None:
            return found
    return None


def _to_int(value: Any) -> int:
    if value is _NO_MATCH:
        return 0
    if isinstance(value, bool):
        raise BinDataShapeError(f"boolean is not an amount: {value!r}")
    if isinstance(value, int):
        amount = value
    else:
        text = str(value).strip()
        try:
            amount = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError as exc:
            raise BinDataShapeError(f"amount {text!r} is not an integer") from exc
    if amount < 0:
        raise BinDataShapeError(f"negative amount {amount}")
    return amount


def _to_price(value: Any) -> str | float | None:
    """Keep a price tag only if it parses as a number."""
    if value is _NO_MATCH or isinstance(value, bool):
        return None
    try:
        float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric bin price %r", value)
        return None
    return value


def map_bins(entries: list[Any]) -> list[Bin]:
    """Map raw bin entries using field names resolved from the first entry."""
    if not entries:
        return []
    sample = entries[0]
    id_probe = first_match(BIN_ID_PROBES, sample)
    if id_probe is None:
        logger.warning("Cannot identify bin id field in bin payload")
        return []
    x_probe = first_match(X_AMOUNT_PROBES, sample)
    y_probe = first_match(Y_AMOUNT_PROBES, sample)
    if x_probe is None or y_probe is None:
        logger.warning("Cannot identify x/y amount fields in bin payload")
        return []
    price_probe = first_match(PRICE_PROBES, sample)

    bins: list[Bin] = []
    for entry in entries:
        raw_id = id_probe.probe(entry)
        if isinstance(raw_id, bool) or not isinstance(raw_id, int):
            logger.warning("Skipping bin with non-integer %s: %r", id_probe.name, raw_id)
            continue
        try:
            x = _to_int(x_probe.probe(entry))
            y = _to_int(y_probe.probe(entry))
        except BinDataShapeError as exc:
            logger.warning("Skipping bin %d with unparseable amounts: %s", raw_id, exc)
            continue
        price = _to_price(price_probe.probe(entry)) if price_probe is not None else None
        bins.append(Bin(bin_id=raw_id, x=x, y=y, price=price))
    return bins


def extract_bins(payload: Any, position_address: str = "?") -> list[Bin]:
    """Extract bins from a raw position payload; empty list when nothing matches."""
    for probe in CONTAINER_PROBES:
        value = probe.probe(payload)
        if isinstance(value, list) and value:
            return map_bins(value)

    found = _find_bin_list(payload)
    if found is not None:
        return map_bins(found)

    logger.warning("No bin data found for position %s", position_address)
    return []
