from .tracking import generate_tracking_number, unique_tracking_number
from .status import apply_status_change

__all__ = [
    "generate_tracking_number",
    "unique_tracking_number",
    "apply_status_change",
]
