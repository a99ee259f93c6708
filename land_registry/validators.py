"""
Deterministic input validation for land registration.

Each validator function:
  - Takes a ParcelDetails
  - Returns a list of FieldProblem objects (empty = all clear)
  - Is pure and independently testable

validate_all() runs every check so a registrant sees every problem at once.
"""

from __future__ import annotations

from .models import FieldProblem, ParcelDetails


# ─── Constants ───────────────────────────────────────────────────────

TEXT_FIELDS: tuple[str, ...] = ("plot_number", "area", "district", "city", "state")

_DISPLAY_NAMES: dict[str, str] = {
    "plot_number": "Plot number",
    "area": "Area",
    "district": "District",
    "city": "City",
    "state": "State",
}


# ─── Orchestrator ────────────────────────────────────────────────────


def validate_all(parcel: ParcelDetails) -> list[FieldProblem]:
    """Run ALL validators and collect problems."""
    problems: list[FieldProblem] = []
    problems.extend(validate_text_fields(parcel))
    problems.extend(validate_area_size(parcel))
    return problems


# ─── Individual Validators ───────────────────────────────────────────


def validate_text_fields(parcel: ParcelDetails) -> list[FieldProblem]:
    """Every descriptive field must contain something besides whitespace."""
    problems: list[FieldProblem] = []

    for field_name in TEXT_FIELDS:
        value = getattr(parcel, field_name)
        if not value.strip():
            problems.append(
                FieldProblem(
                    code="EMPTY_FIELD",
                    field=field_name,
                    message=f"{_DISPLAY_NAMES[field_name]} cannot be empty",
                    details={"value": value},
                )
            )

    return problems


def validate_area_size(parcel: ParcelDetails) -> list[FieldProblem]:
    """The physical size must be a strictly positive whole number."""
    problems: list[FieldProblem] = []

    if parcel.area_sq_yd <= 0:
        problems.append(
            FieldProblem(
                code="NON_POSITIVE_AREA",
                field="area_sq_yd",
                message=(
                    f"Area in square yards must be greater than zero, "
                    f"got {parcel.area_sq_yd!r}"
                ),
                details={"area_sq_yd": parcel.area_sq_yd},
            )
        )

    return problems
