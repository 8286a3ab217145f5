import logging

from flask import request
from flask_restx import Namespace, fields
from sqlalchemy.exc import SQLAlchemyError

from .models import Patient, Appointment, Reward, MedicationSchedule, PatientSurvey, HealthTracking, RISK_LEVELS
from . import db
from .auth import AdminResource
from .schema_fields import NullableString
from .aggregates import filter_patients, patient_balance
from .validators import clean_patient, delete_confirmed
from .appointments import appointment_to_dict
from .engagement import medication_to_dict, survey_to_dict, health_to_dict

logger = logging.getLogger(__name__)

patients_ns = Namespace("patients", description="Gerenciamento de pacientes")

patient_model = patients_ns.model("Patient", {
    "first_name": fields.String(required=True, min_length=1, description="Nome"),
    "last_name": fields.String(required=True, min_length=1, description="Sobrenome"),
    "code_number": fields.String(required=True, min_length=1, description="Código único do paciente"),
    "phone": NullableString(description="Telefone"),
    "email": NullableString(description="E-mail (validado quando preenchido)"),
    "condition": NullableString(description="Condição clínica"),
    "risk_level": fields.String(enum=list(RISK_LEVELS), description="low, medium ou high (padrão low)"),
})


def patient_to_dict(p):
    return {
        "id": p.id,
        "first_name": p.first_name,
        "last_name": p.last_name,
        "code_number": p.code_number,
        "phone": p.phone,
        "email": p.email,
        "condition": p.condition,
        "risk_level": p.risk_level,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }


@patients_ns.route("/")
class PatientList(AdminResource):
    def get(self, current_admin):
        """
        Lista todos os pacientes, com busca opcional:
        /api/patients?search=joao
        """
        search = request.args.get("search", "", type=str)
        patients = filter_patients(Patient.query.order_by(Patient.id).all(), search)
        output = [patient_to_dict(p) for p in patients]
        return {"status": "success", "patients": output, "count": len(output)}, 200

    @patients_ns.expect(patient_model, validate=True)
    def post(self, current_admin):
        """
        Cria um novo paciente. risk_level assume 'low' quando omitido.
        """
        data = clean_patient(request.get_json())
        new_patient = Patient(**data)
        try:
            db.session.add(new_patient)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao cadastrar paciente {data['code_number']}: {e}")
            return {"message": "Erro ao criar paciente.", "error": str(e)}, 500

        logger.info(f"Paciente {new_patient.id} ({new_patient.code_number}) cadastrado")
        return {"message": "Paciente criado com sucesso!", "id": new_patient.id}, 201


@patients_ns.route("/<int:id>")
class PatientDetail(AdminResource):
    def get(self, current_admin, id):
        """
        Busca um paciente específico (por ID).
        """
        paciente = Patient.query.filter_by(id=id).first_or_404()
        return patient_to_dict(paciente), 200

    @patients_ns.expect(patient_model, validate=True)
    def put(self, current_admin, id):
        """
        Atualiza o paciente sobrescrevendo todos os campos editáveis.
        """
        paciente = Patient.query.filter_by(id=id).first_or_404()
        data = clean_patient(request.get_json())
        for field, value in data.items():
            setattr(paciente, field, value)

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao atualizar paciente {id}: {e}")
            return {"message": "Erro ao atualizar paciente.", "error": str(e)}, 500
        return {"message": "Paciente atualizado com sucesso!"}, 200

    def delete(self, current_admin, id):
        """
        Exclui um paciente. Exige ?confirm=true; os registros vinculados
        permanecem, sem paciente.
        """
        paciente = Patient.query.filter_by(id=id).first_or_404()
        if not delete_confirmed():
            return {"message": "Confirme a exclusão com ?confirm=true."}, 400
        try:
            db.session.delete(paciente)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao excluir paciente {id}: {e}")
            return {"message": "Erro ao excluir paciente.", "error": str(e)}, 500

        logger.info(f"Paciente {id} excluído")
        return {"message": "Paciente excluído com sucesso!"}, 200


@patients_ns.route("/<int:id>/overview")
class PatientOverview(AdminResource):
    def get(self, current_admin, id):
        """
        Visão do portal do paciente: dados, pontos, consultas, medicações,
        questionários e registros de saúde.
        """
        paciente = Patient.query.filter_by(id=id).first_or_404()
        rewards = Reward.query.filter_by(patient_id=id).all()
        appointments = Appointment.query.filter_by(patient_id=id).order_by(Appointment.date).all()
        medications = MedicationSchedule.query.filter_by(patient_id=id).all()
        surveys = PatientSurvey.query.filter_by(patient_id=id).all()
        health = HealthTracking.query.filter_by(patient_id=id).order_by(HealthTracking.recorded_at).all()

        return {
            "patient": patient_to_dict(paciente),
            "points": patient_balance(rewards, id),
            "appointments": [appointment_to_dict(a, paciente) for a in appointments],
            "medications": [medication_to_dict(m) for m in medications],
            "surveys": [survey_to_dict(s) for s in surveys],
            "health_tracking": [health_to_dict(h) for h in health],
        }, 200
