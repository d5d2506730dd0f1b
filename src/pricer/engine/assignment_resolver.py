"""
Multiplier Assignment Resolver - turns the assignment text typed for one
product into a clean multiplier_id -> quantity mapping.

Rules:
- Blank, non-integer and <= 0 entries are dropped ("not applied").
- Multiplier ids missing from the catalog are dropped (stale state).
- One multiplier covering more units than the item has is rejected.
- Several multipliers together may cover more units than the item has.
  Each multiplier is charged independently; the overlap is only reported.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Union

from ..errors import AssignmentQuantityError, QuoteValidationError
from .models import MultiplierCatalog, TraceStep, index_multipliers
from .parsing import parse_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentResolution:
    """Validated assignments for one product plus what was dropped and why."""
    quantities: Mapping[str, int]
    total_quantity: int
    dropped_invalid: tuple[str, ...] = ()
    dropped_unknown: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    trace: tuple[TraceStep, ...] = field(default=(), compare=False, repr=False)

    @property
    def assigned_sum(self) -> int:
        return sum(self.quantities.values())

    @property
    def exceeds_total(self) -> bool:
        return self.total_quantity > 0 and self.assigned_sum > self.total_quantity


def resolve_assignments(
    raw_assignments: Mapping[str, Union[str, int, None]],
    total_quantity: int,
    catalog_multipliers: MultiplierCatalog,
) -> AssignmentResolution:
    """
    Validate and normalize one product's multiplier assignments.

    Args:
        raw_assignments: multiplier_id -> quantity as entered (text or int)
        total_quantity: The product's ordered quantity (0 if not ordered yet)
        catalog_multipliers: Current catalog multipliers

    Returns:
        AssignmentResolution whose `quantities` only holds positive quantities
        for multipliers that still exist

    Raises:
        QuoteValidationError: total_quantity is negative
        AssignmentQuantityError: a single assignment exceeds total_quantity
    """
    if total_quantity < 0:
        raise QuoteValidationError(f"Total quantity must be >= 0, got {total_quantity}")

    known = index_multipliers(catalog_multipliers)
    quantities: dict[str, int] = {}
    dropped_invalid = []
    dropped_unknown = []
    trace = []

    for multiplier_id, raw_qty in (raw_assignments or {}).items():
        qty = parse_quantity(raw_qty)
        if qty is None or qty <= 0:
            dropped_invalid.append(multiplier_id)
            continue
        if multiplier_id not in known:
            dropped_unknown.append(multiplier_id)
            trace.append(TraceStep("Assignment", "Dropped assignment for deleted multiplier", multiplier_id))
            continue
        # An unordered product keeps its assignments until a quantity is entered
        if total_quantity > 0 and qty > total_quantity:
            raise AssignmentQuantityError(multiplier_id, qty, total_quantity)
        quantities[multiplier_id] = qty
        trace.append(TraceStep("Assignment", f"{known[multiplier_id].name} applies to", str(qty)))

    warnings = []
    assigned_sum = sum(quantities.values())
    if total_quantity > 0 and assigned_sum > total_quantity:
        message = (
            f"Assigned multiplier quantities ({assigned_sum}) exceed total item quantity "
            f"({total_quantity}); multipliers are applied independently"
        )
        warnings.append(message)
        logger.warning(message)

    return AssignmentResolution(
        quantities=MappingProxyType(quantities),
        total_quantity=total_quantity,
        dropped_invalid=tuple(dropped_invalid),
        dropped_unknown=tuple(dropped_unknown),
        warnings=tuple(warnings),
        trace=tuple(trace),
    )
