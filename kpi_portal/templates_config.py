"""
Shared Jinja2 templates configuration with custom filters.
All route modules should import templates from here.
"""
from datetime import date, datetime
import json
from fastapi.templating import Jinja2Templates

from kpi_portal.config import TEMPLATES_DIR
from kpi_portal.formatters import format_label, format_number, format_number_compact

templates = Jinja2Templates(directory=TEMPLATES_DIR)

STATUS_CSS = {
    "Completed": "status-done",
    "Achieved": "status-done",
    "In progress": "status-active",
    "Behind": "status-late",
    "Not achieved": "status-late",
}


def format_date(value, format_str='%d/%m/%Y'):
    """Format a date, datetime or ISO string for display."""
    if value is None:
        return '-'
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    if isinstance(value, (date, datetime)):
        return value.strftime(format_str)
    return str(value)


def status_css(status):
    """CSS class for a status label."""
    return STATUS_CSS.get(status, "status-late")


def json_serial(obj):
    """JSON serializer for objects not serializable by default json code."""
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    raise TypeError(f"Type {type(obj)} not serializable")


def safe_tojson(value):
    """Safely convert value to JSON, handling date objects."""
    return json.dumps(value, default=json_serial)


# Register custom filters
templates.env.filters['format_date'] = format_date
templates.env.filters['format_number'] = format_number
templates.env.filters['format_compact'] = format_number_compact
templates.env.filters['format_label'] = format_label
templates.env.filters['status_css'] = status_css
templates.env.filters['safe_tojson'] = safe_tojson
