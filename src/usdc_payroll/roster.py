"""Loading and selecting the employee roster."""

from __future__ import annotations

import json
from decimal import MAX_PREC, Decimal, localcontext
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import ValidationError

from usdc_payroll.errors import ConfigurationError
from usdc_payroll.models import Employee


def load_roster(path: Path) -> list[Employee]:
    """Read a JSON array of employees.

    Numbers are parsed as :class:`~decimal.Decimal` so salaries never pass
    through a float.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not a JSON array of valid employees, or
        repeats an employee id.
    """
    if not path.exists():
        raise ConfigurationError(f"Roster file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Roster {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ConfigurationError(f"Roster {path} must contain a JSON array.")

    employees: list[Employee] = []
    seen: set[int] = set()
    for index, item in enumerate(data):
        try:
            employee = Employee.model_validate(item)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid employee at position {index} in {path}: {exc}"
            ) from exc
        if employee.id in seen:
            raise ConfigurationError(f"Duplicate employee id {employee.id} in {path}")
        seen.add(employee.id)
        employees.append(employee)
    return employees


def select_employees(roster: Sequence[Employee], ids: Iterable[int]) -> list[Employee]:
    """Employees whose id is in *ids*, in roster order. Unknown ids are ignored."""
    wanted = set(ids)
    return [employee for employee in roster if employee.id in wanted]


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    """Add amounts without rounding, whatever their magnitude."""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        return sum(values, Decimal(0))


def format_amount(value: Decimal, decimals: int = 6) -> str:
    exponent = Decimal((0, (1,), -decimals))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        return str(value.quantize(exponent))


def total_amount(employees: Iterable[Employee], decimals: int = 6) -> str:
    """Sum of salaries rendered with *decimals* fractional digits."""
    return format_amount(sum_amounts(e.salary for e in employees), decimals)
