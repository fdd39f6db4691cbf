"""
Typed view of the optimization-service payload.

The service returns loosely structured JSON. Records are checked here, at the
boundary, so the graph builder only ever sees well-formed flows. In lenient
mode a bad record is flagged (kept in `ShippingPlan.rejected` and logged) and
left out of the plan; in strict mode it raises `ShippingPlanError`.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

# section name -> (source field, target field)
SECTIONS: dict[str, tuple[str, str]] = {
    "plant_to_warehouse": ("plant", "warehouse"),
    "warehouse_to_customer": ("warehouse", "customer"),
}


class ShippingPlanError(ValueError):
    pass


@dataclass(frozen=True)
class FlowRecord:
    source: str
    target: str
    amount: float


@dataclass(frozen=True)
class RejectedRecord:
    section: str
    index: int
    record: Any
    reason: str


@dataclass
class ShippingPlan:
    plant_to_warehouse: list[FlowRecord] = field(default_factory=list)
    warehouse_to_customer: list[FlowRecord] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)


@dataclass
class ServiceResult:
    """Subset of the optimization-service response this project consumes."""

    status: Optional[str]
    objective_value: Optional[float]
    warehouses_opened: list[str]
    shipping_plan: ShippingPlan
    network_metrics: dict[str, Any] = field(default_factory=dict)


def _coerce_id(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, str)):
        text = str(value).strip()
        return text or None
    return None


def _coerce_amount(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def _parse_record(record: Any, src_key: str, dst_key: str) -> tuple[Optional[FlowRecord], str]:
    if not isinstance(record, Mapping):
        return None, f"expected an object, got {type(record).__name__}"
    src = _coerce_id(record.get(src_key))
    if src is None:
        return None, f"missing or invalid '{src_key}'"
    dst = _coerce_id(record.get(dst_key))
    if dst is None:
        return None, f"missing or invalid '{dst_key}'"
    amount = _coerce_amount(record.get("amount"))
    if amount is None:
        return None, "missing, negative or non-numeric 'amount'"
    return FlowRecord(source=src, target=dst, amount=amount), ""


def parse_shipping_plan(payload: Optional[Mapping[str, Any]], strict: bool = False) -> ShippingPlan:
    """
    Validate a raw shipping plan mapping.

    Args:
        payload: `{"plant_to_warehouse": [...], "warehouse_to_customer": [...]}`.
            Missing sections count as empty.
        strict: raise on the first malformed record instead of flagging it.

    Returns:
        ShippingPlan with the accepted records in input order.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ShippingPlanError(f"shipping plan must be an object, got {type(payload).__name__}")

    plan = ShippingPlan()
    for section, (src_key, dst_key) in SECTIONS.items():
        records = payload.get(section) or []
        if not isinstance(records, (list, tuple)):
            raise ShippingPlanError(f"'{section}' must be a list, got {type(records).__name__}")
        accepted: list[FlowRecord] = getattr(plan, section)
        for i, raw in enumerate(records):
            rec, reason = _parse_record(raw, src_key, dst_key)
            if rec is not None:
                accepted.append(rec)
                continue
            if strict:
                raise ShippingPlanError(f"{section}[{i}]: {reason}")
            logger.warning("Skipping %s[%d]: %s", section, i, reason)
            plan.rejected.append(RejectedRecord(section=section, index=i, record=raw, reason=reason))
    return plan


def parse_warehouses_opened(ids: Optional[Iterable[Any]]) -> list[str]:
    """
    Validate the list of opened warehouse ids.

    A bare string (or mapping) is not a list of ids and raises
    `ShippingPlanError` rather than being split into characters / keys.
    """
    if ids is None:
        return []
    if isinstance(ids, (str, bytes, Mapping)) or not isinstance(ids, Iterable):
        raise ShippingPlanError(f"warehouses_opened must be a list of ids, got {type(ids).__name__}")
    out: list[str] = []
    for i, raw in enumerate(ids):
        wid = _coerce_id(raw)
        if wid is None:
            logger.warning("Skipping warehouses_opened[%d]: invalid id %r", i, raw)
            continue
        out.append(wid)
    return out


def _parse_objective(value: Any, strict: bool) -> Optional[float]:
    if value is None:
        return None
    if not isinstance(value, bool):
        try:
            objective = float(value)
        except (TypeError, ValueError, OverflowError):
            objective = math.nan
        if math.isfinite(objective):
            return objective
    if strict:
        raise ShippingPlanError(f"objective_value is not a finite number: {value!r}")
    logger.warning("Ignoring objective_value %r: not a finite number", value)
    return None


def _parse_metrics(value: Any, strict: bool) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if strict:
        raise ShippingPlanError(f"network_metrics must be an object, got {type(value).__name__}")
    logger.warning("Ignoring network_metrics: expected an object, got %s", type(value).__name__)
    return {}


def load_service_response(path: str | Path, strict: bool = False) -> ServiceResult:
    """
    Read a saved optimization-service JSON response from disk.

    Summary fields that cannot be read (`objective_value`, `network_metrics`)
    are dropped with a warning, or raise `ShippingPlanError` when `strict`.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, Mapping):
        raise ShippingPlanError(f"{path}: expected a JSON object at top level")

    return ServiceResult(
        status=data.get("status"),
        objective_value=_parse_objective(data.get("objective_value"), strict),
        warehouses_opened=parse_warehouses_opened(data.get("warehouses_opened")),
        shipping_plan=parse_shipping_plan(data.get("shipping_plan"), strict=strict),
        network_metrics=_parse_metrics(data.get("network_metrics"), strict),
    )
