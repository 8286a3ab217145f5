import logging

from flask import request
from flask_restx import Namespace, fields
from sqlalchemy.exc import SQLAlchemyError

from .models import Appointment, Patient, APPOINTMENT_STATUSES
from . import db
from .auth import AdminResource
from .aggregates import filter_appointments, group_by_date, patient_display_name
from .validators import clean_appointment, delete_confirmed

logger = logging.getLogger(__name__)

appointments_ns = Namespace("appointments", description="Agenda de consultas")

appointment_model = appointments_ns.model("Appointment", {
    "patient_id": fields.Integer(required=True, description="ID do paciente"),
    "date": fields.String(required=True, description="Data da consulta (YYYY-MM-DD)"),
    "time": fields.String(required=True, min_length=1, description="Hora (texto livre, ex.: 09:30 AM)"),
    "type": fields.String(required=True, min_length=1, description="Tipo da consulta"),
    "status": fields.String(enum=list(APPOINTMENT_STATUSES), description="pending, completed ou cancelled"),
})


def appointment_to_dict(a, patient=None):
    return {
        "id": a.id,
        "patient_id": a.patient_id,
        "patient_name": patient_display_name(patient),
        "date": a.date,
        "time": a.time,
        "type": a.type,
        "status": a.status,
        "created_at": a.created_at.isoformat() if a.created_at else None,
    }


def _load_filtered():
    search = request.args.get("search", "", type=str)
    patients_by_id = {p.id: p for p in Patient.query.all()}
    appointments = Appointment.query.order_by(Appointment.date, Appointment.id).all()
    return filter_appointments(appointments, patients_by_id, search), patients_by_id


@appointments_ns.route("/")
class AppointmentList(AdminResource):
    def get(self, current_admin):
        """
        Lista as consultas com o nome do paciente. Busca opcional em nome,
        código, tipo, status e data.
        """
        appointments, patients_by_id = _load_filtered()
        output = [appointment_to_dict(a, patients_by_id.get(a.patient_id)) for a in appointments]
        return {"status": "success", "appointments": output, "count": len(output)}, 200

    @appointments_ns.expect(appointment_model, validate=True)
    def post(self, current_admin):
        """
        Agenda uma nova consulta (status padrão 'pending').
        """
        data = clean_appointment(request.get_json())
        new_appointment = Appointment(**data)
        try:
            db.session.add(new_appointment)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao agendar consulta do paciente {data['patient_id']}: {e}")
            return {"message": "Erro ao agendar consulta.", "error": str(e)}, 500

        logger.info(f"Consulta {new_appointment.id} agendada para {new_appointment.date}")
        return {"message": "Consulta agendada com sucesso!", "id": new_appointment.id}, 201


@appointments_ns.route("/grouped")
class AppointmentsByDate(AdminResource):
    def get(self, current_admin):
        """
        Consultas agrupadas por data, em ordem de data.
        """
        appointments, patients_by_id = _load_filtered()
        groups = [
            {
                "date": day,
                "appointments": [appointment_to_dict(a, patients_by_id.get(a.patient_id)) for a in items],
            }
            for day, items in group_by_date(appointments).items()
        ]
        return {"status": "success", "groups": groups, "count": len(appointments)}, 200


@appointments_ns.route("/<int:id>")
class AppointmentDetail(AdminResource):
    def get(self, current_admin, id):
        consulta = Appointment.query.filter_by(id=id).first_or_404()
        patient = Patient.query.filter_by(id=consulta.patient_id).first() if consulta.patient_id else None
        return appointment_to_dict(consulta, patient), 200

    @appointments_ns.expect(appointment_model, validate=True)
    def put(self, current_admin, id):
        """
        Sobrescreve a consulta; qualquer transição de status é aceita.
        """
        consulta = Appointment.query.filter_by(id=id).first_or_404()
        data = clean_appointment(request.get_json())
        for field, value in data.items():
            setattr(consulta, field, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao atualizar consulta {id}: {e}")
            return {"message": "Erro ao atualizar consulta.", "error": str(e)}, 500
        return {"message": "Consulta atualizada com sucesso!"}, 200

    def delete(self, current_admin, id):
        consulta = Appointment.query.filter_by(id=id).first_or_404()
        if not delete_confirmed():
            return {"message": "Confirme a exclusão com ?confirm=true."}, 400
        try:
            db.session.delete(consulta)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao excluir consulta {id}: {e}")
            return {"message": "Erro ao excluir consulta.", "error": str(e)}, 500

        logger.info(f"Consulta {id} excluída")
        return {"message": "Consulta excluída com sucesso!"}, 200


@appointments_ns.route("/<int:id>/complete")
class CompleteAppointment(AdminResource):
    def post(self, current_admin, id):
        """
        Marca a consulta como concluída. Repetir a chamada não gera erro.
        """
        consulta = Appointment.query.filter_by(id=id).first_or_404()
        consulta.status = "completed"
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao concluir consulta {id}: {e}")
            return {"message": "Erro ao concluir consulta.", "error": str(e)}, 500
        return {"message": "Consulta concluída!", "id": consulta.id, "status": consulta.status}, 200
