"""
Shared test fixtures -- objective and monthly value builders for unit and integration tests.
"""
import datetime

from kpi_portal.progress import MonthlyValue, Objective, ObjectiveType, ObjectiveWithValues


# ── Domain objects ───────────────────────────────────────────────────

def make_objective(
    objective_id=1,
    department="Sales",
    objective_type=ObjectiveType.CUMULATIVE,
    target=1000.0,
    reverse_logic=False,
    start_date=datetime.date(2025, 1, 1),
    end_date=datetime.date(2025, 12, 31),
    name="Fatturato",
    description="Raggiungere il fatturato annuale",
    number_format="number",
    order_index=0,
):
    return Objective(
        id=objective_id,
        department=department,
        type=objective_type,
        target=target,
        reverse_logic=reverse_logic,
        start_date=start_date,
        end_date=end_date,
        name=name,
        description=description,
        number_format=number_format,
        order_index=order_index,
    )


def make_values(monthly, year=2025, objective_id=1):
    """{month: value} -> list of MonthlyValue."""
    return [
        MonthlyValue(month=month, year=year, value=value, objective_id=objective_id)
        for month, value in monthly.items()
    ]


def make_tracked(objective=None, monthly=None, year=2025, **objective_kwargs):
    objective = objective or make_objective(**objective_kwargs)
    return ObjectiveWithValues(objective, make_values(monthly or {}, year=year, objective_id=objective.id))


# ── Database rows / API payloads ─────────────────────────────────────

def make_objective_row(
    objective_id=1,
    department="Sales",
    objective_name="Fatturato",
    objective_smart="Raggiungere il fatturato annuale",
    type_objective="Cumulativo",
    target_numeric=1000,
    number_format="number",
    start_date="2025-01-01",
    end_date="2025-12-31",
    order_index=0,
    reverse_logic=0,
):
    """Row dict shaped like a SELECT * FROM objectives result."""
    return {
        "id": objective_id,
        "department": department,
        "objective_name": objective_name,
        "objective_smart": objective_smart,
        "type_objective": type_objective,
        "target_numeric": target_numeric,
        "number_format": number_format,
        "start_date": start_date,
        "end_date": end_date,
        "order_index": order_index,
        "reverse_logic": reverse_logic,
        "created_at": "2025-01-01 09:00:00",
    }


def make_objective_payload(**overrides):
    """JSON body for POST /api/objectives."""
    payload = {
        "department": "Sales",
        "objective_name": "Fatturato",
        "objective_smart": "Raggiungere fatturato annuale di 500.000",
        "type_objective": "Cumulativo",
        "target_numeric": 1000,
        "number_format": "number",
        "start_date": "2025-01-01",
        "end_date": "2025-12-31",
        "reverse_logic": False,
    }
    payload.update(overrides)
    return payload


# Reference instants used across tests
MARCH_31_2025 = datetime.datetime(2025, 3, 31, 12, 0, 0)
JULY_1_2025 = datetime.datetime(2025, 7, 1, 0, 0, 0)
