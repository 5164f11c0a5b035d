from .base import Widget
from .chart import Bar, Chart, Doughnut, Line, Pie, Radar
from .dashboard import DashboardWidget
from .modal_form import ModalForm

__all__ = [
    "Widget",
    "Chart",
    "Bar",
    "Line",
    "Pie",
    "Doughnut",
    "Radar",
    "DashboardWidget",
    "ModalForm",
]
