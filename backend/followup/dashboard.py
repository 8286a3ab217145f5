from flask_restx import Namespace

from .models import Patient, Appointment
from .auth import AdminResource
from .aggregates import dashboard_stats
from .settings import get_doctor_name

dashboard_ns = Namespace("dashboard", description="Resumo do painel administrativo")


@dashboard_ns.route("/")
class Dashboard(AdminResource):
    def get(self, current_admin):
        """Contagens recalculadas a cada leitura."""
        stats = dashboard_stats(Patient.query.all(), Appointment.query.all())
        stats["doctor_name"] = get_doctor_name()
        return stats, 200
