"""
Sample objectives for demos and local development.

seed_sample_data() replaces all objectives with two per department and fills
the current year's months up to the reference month. seed_expiry_scenarios()
adds objectives that are already expired or about to expire.
"""
import random
from datetime import date, timedelta

from kpi_portal.app_logger import get_logger
from kpi_portal.database import create_objective, reset_database, upsert_objective_value

logger = get_logger(__name__)

SAMPLE_OBJECTIVES = [
    ("Grafico", "Progetti Grafici", "Aumentare progetti grafici completati del 20% rispetto all'anno precedente",
     "Cumulativo", 120, "number", False),
    ("Grafico", "Qualità Progetti", "Mantenere qualità media progetti sopra 4.5/5",
     "Mantenimento", 4.5, "decimal", False),
    ("Sales", "Fatturato Annuale", "Raggiungere fatturato annuale di €500.000",
     "Cumulativo", 500000, "currency", False),
    ("Sales", "Nuovi Clienti Premium", "Acquisire 15 nuovi clienti premium al mese",
     "Mantenimento", 15, "number", False),
    ("Financial", "Tasso Insoluti", "Mantenere il tasso di insoluti sotto il 5%",
     "Mantenimento", 5, "percentage", True),
    ("Financial", "Margine Profitto", "Mantenere margine di profitto sopra il 25%",
     "Mantenimento", 25, "percentage", False),
    ("Agency", "Campagne Marketing", "Completare 200 campagne marketing digitale",
     "Cumulativo", 200, "number", False),
    ("Agency", "CTR Campagne", "Raggiungere CTR medio del 3.5% sulle campagne",
     "Mantenimento", 3.5, "percentage", False),
    ("PM Company", "Progetti in Tempo", "Consegnare 95% dei progetti entro deadline",
     "Mantenimento", 95, "percentage", False),
    ("PM Company", "Tempo Medio Progetto", "Ridurre tempo medio progetto a 30 giorni",
     "Ultimo mese", 30, "number", True),
    ("Marketing", "Lead Qualificati", "Generare 10.000 lead qualificati",
     "Cumulativo", 10000, "number", False),
    ("Marketing", "Engagement Social", "Mantenere engagement rate social sopra 5%",
     "Mantenimento", 5, "percentage", False),
]


def _sample_value(type_objective: str, target: float, reverse_logic: bool, month: int, rng: random.Random) -> float:
    if type_objective == "Cumulativo":
        # Monthly share of the annual target with some noise
        value = target / 12 * (0.8 + rng.random() * 0.4)
    elif type_objective == "Mantenimento":
        value = target * (0.85 + rng.random() * 0.3)
    elif reverse_logic:
        # Improving towards a lower-is-better target
        value = target * (1.5 - month * 0.05)
    else:
        value = target * (1.2 - month * 0.02)
    return round(value, 2)


def seed_sample_data(conn, as_of: date = None, seed: int = 42) -> int:
    """Reset the database and insert sample objectives. Returns the objective count."""
    as_of = as_of or date.today()
    rng = random.Random(seed)
    reset_database(conn)

    year = as_of.year
    for index, (department, name, smart, type_objective, target, fmt, reverse) in enumerate(SAMPLE_OBJECTIVES):
        objective_id = create_objective(conn, {
            "department": department,
            "objective_name": name,
            "objective_smart": smart,
            "type_objective": type_objective,
            "target_numeric": target,
            "number_format": fmt,
            "start_date": date(year, 1, 1).isoformat(),
            "end_date": date(year, 12, 31).isoformat(),
            "order_index": index,
            "reverse_logic": reverse,
        })
        for month in range(1, as_of.month + 1):
            value = _sample_value(type_objective, target, reverse, month, rng)
            upsert_objective_value(conn, objective_id, month, year, value)

    logger.info("Seeded %s sample objectives for %s", len(SAMPLE_OBJECTIVES), year)
    return len(SAMPLE_OBJECTIVES)


def seed_expiry_scenarios(conn, as_of: date = None) -> list:
    """Add objectives around their expiry date. Returns the new ids."""
    as_of = as_of or date.today()
    last_year = as_of.year - 1

    scenarios = [
        {
            "department": "Grafico",
            "objective_name": f"Progetti Q3 {last_year} (Scaduto)",
            "objective_smart": f"Completare 50 progetti grafici entro settembre {last_year}",
            "type_objective": "Cumulativo",
            "target_numeric": 50,
            "number_format": "number",
            "start_date": date(last_year, 7, 1),
            "end_date": date(last_year, 9, 30),
            "values": [(month, last_year, 12.5) for month in (7, 8, 9)],
        },
        {
            "department": "Financial",
            "objective_name": f"Budget {last_year} (Scaduto)",
            "objective_smart": f"Mantenere spese sotto budget fino a dicembre {last_year}",
            "type_objective": "Mantenimento",
            "target_numeric": 100000,
            "number_format": "currency",
            "reverse_logic": True,
            "start_date": date(last_year, 1, 1),
            "end_date": date(last_year, 12, 31),
            "values": [(month, last_year, 95000 + month * 800) for month in range(1, 13)],
        },
        {
            "department": "Sales",
            "objective_name": "Campagna Stagionale (Scade Presto)",
            "objective_smart": "Raggiungere 1000 vendite per la campagna stagionale",
            "type_objective": "Cumulativo",
            "target_numeric": 1000,
            "number_format": "number",
            "start_date": as_of - timedelta(days=30),
            "end_date": as_of + timedelta(days=18),
            "values": [(as_of.month, as_of.year, 600)],
        },
        {
            "department": "Agency",
            "objective_name": "ROI Immediato (Scade Domani)",
            "objective_smart": "Migliorare ROI campagne al 15%",
            "type_objective": "Ultimo mese",
            "target_numeric": 15,
            "number_format": "percentage",
            "start_date": as_of - timedelta(days=28),
            "end_date": as_of + timedelta(days=1),
            "values": [(as_of.month, as_of.year, 14.4)],
        },
    ]

    ids = []
    for order, scenario in enumerate(scenarios, start=200):
        values = scenario.pop("values")
        scenario["order_index"] = order
        objective_id = create_objective(conn, scenario)
        for month, year, value in values:
            upsert_objective_value(conn, objective_id, month, year, value)
        ids.append(objective_id)

    logger.info("Added %s expiry scenario objectives", len(ids))
    return ids
