"""
Engajamento do paciente: registros de saúde, medicações, lembretes
agendados e questionários.
"""
import datetime
import logging

from flask import request
from flask_restx import Namespace, fields, Resource
from sqlalchemy.exc import SQLAlchemyError

from .models import (
    HealthTracking, MedicationSchedule, NotificationSchedule, PatientSurvey, Patient,
    SURVEY_TYPES, DELIVERY_METHODS, NOTIFICATION_TYPES,
)
from . import db
from .auth import AdminResource
from .schema_fields import AnyValue, NullableInteger, NullableString
from .messaging import build_link
from .validators import (
    clean_health_tracking, clean_medication_schedule, clean_notification, clean_survey,
)

logger = logging.getLogger(__name__)

engagement_ns = Namespace("engagement", description="Saúde, medicações, lembretes e questionários")

SURVEY_TEMPLATES = {
    "pre_appointment": [
        {"id": "pain_level", "type": "radio", "question": "How would you rate your current pain level?",
         "options": ["1", "2", "3", "4", "5"]},
        {"id": "symptoms", "type": "textarea", "question": "Please describe any symptoms you are experiencing:"},
        {"id": "medications", "type": "textarea", "question": "List any medications you are currently taking:"},
        {"id": "concerns", "type": "textarea", "question": "What specific concerns would you like to discuss?"},
    ],
    "post_appointment": [
        {"id": "satisfaction", "type": "radio", "question": "How satisfied were you with your appointment?",
         "options": ["Very Dissatisfied", "Dissatisfied", "Neutral", "Satisfied", "Very Satisfied"]},
        {"id": "understanding", "type": "radio", "question": "How well did you understand the treatment plan?",
         "options": ["Not at all", "Slightly", "Moderately", "Well", "Very Well"]},
        {"id": "follow_up", "type": "textarea", "question": "Any additional questions or concerns?"},
        {"id": "improvement", "type": "radio", "question": "Do you feel your condition has improved?",
         "options": ["Much Worse", "Worse", "No Change", "Better", "Much Better"]},
    ],
    "general_health": [
        {"id": "overall_health", "type": "radio", "question": "How would you rate your overall health?",
         "options": ["Poor", "Fair", "Good", "Very Good", "Excellent"]},
        {"id": "exercise", "type": "radio", "question": "How often do you exercise?",
         "options": ["Never", "Rarely", "Sometimes", "Often", "Daily"]},
        {"id": "sleep", "type": "radio", "question": "How would you rate your sleep quality?",
         "options": ["Very Poor", "Poor", "Fair", "Good", "Excellent"]},
        {"id": "stress", "type": "radio", "question": "How would you rate your stress level?",
         "options": ["Very Low", "Low", "Moderate", "High", "Very High"]},
    ],
}

health_model = engagement_ns.model("HealthTracking", {
    "patient_id": fields.Integer(required=True, description="ID do paciente"),
    "tracking_type": fields.String(required=True, min_length=1, description="Ex.: vitals, weight"),
    "value": AnyValue(required=True, description="Valor medido (objeto, lista, número ou texto)"),
    "notes": NullableString(description="Observações"),
    "recorded_at": NullableString(description="Momento da medição (ISO 8601)"),
})

medication_model = engagement_ns.model("MedicationSchedule", {
    "patient_id": fields.Integer(required=True, description="ID do paciente"),
    "medication_name": fields.String(required=True, min_length=1, description="Medicamento"),
    "dosage": fields.String(required=True, min_length=1, description="Dosagem"),
    "frequency": fields.String(required=True, min_length=1, description="Frequência"),
    "start_date": fields.String(required=True, description="Início (YYYY-MM-DD)"),
    "end_date": NullableString(description="Fim (YYYY-MM-DD)"),
    "reminder_times": fields.List(fields.String, description="Horários de lembrete (HH:MM)"),
    "notes": NullableString(description="Observações"),
})

active_model = engagement_ns.model("MedicationActive", {
    "is_active": fields.Boolean(required=True, description="Ativa ou pausa o esquema"),
})

notification_model = engagement_ns.model("NotificationSchedule", {
    "patient_id": NullableInteger(description="ID do paciente"),
    "appointment_id": NullableInteger(description="Consulta relacionada"),
    "medication_schedule_id": NullableInteger(description="Medicação relacionada"),
    "notification_type": fields.String(required=True, enum=list(NOTIFICATION_TYPES)),
    "delivery_method": fields.String(enum=list(DELIVERY_METHODS), description="sms (padrão), whatsapp ou email"),
    "scheduled_time": fields.String(required=True, description="Quando enviar (ISO 8601)"),
    "message_content": fields.String(required=True, min_length=1, description="Texto do lembrete"),
})

survey_model = engagement_ns.model("PatientSurvey", {
    "patient_id": fields.Integer(required=True, description="ID do paciente"),
    "appointment_id": NullableInteger(description="Consulta relacionada"),
    "survey_type": fields.String(required=True, enum=list(SURVEY_TYPES)),
    "questions": fields.List(fields.Raw, description="Perguntas; padrão conforme o tipo"),
})

survey_response_model = engagement_ns.model("SurveyResponse", {
    "responses": fields.Raw(required=True, description="Respostas por id da pergunta"),
})


def _iso(value):
    return value.isoformat() if value else None


def health_to_dict(h):
    return {
        "id": h.id,
        "patient_id": h.patient_id,
        "tracking_type": h.tracking_type,
        "value": h.value,
        "notes": h.notes,
        "recorded_at": _iso(h.recorded_at),
    }


def medication_to_dict(m):
    return {
        "id": m.id,
        "patient_id": m.patient_id,
        "medication_name": m.medication_name,
        "dosage": m.dosage,
        "frequency": m.frequency,
        "start_date": _iso(m.start_date),
        "end_date": _iso(m.end_date),
        "reminder_times": m.reminder_times,
        "is_active": m.is_active,
        "notes": m.notes,
    }


def notification_to_dict(n):
    return {
        "id": n.id,
        "patient_id": n.patient_id,
        "appointment_id": n.appointment_id,
        "medication_schedule_id": n.medication_schedule_id,
        "notification_type": n.notification_type,
        "delivery_method": n.delivery_method,
        "scheduled_time": _iso(n.scheduled_time),
        "message_content": n.message_content,
        "status": n.status,
        "sent_at": _iso(n.sent_at),
    }


def survey_to_dict(s):
    return {
        "id": s.id,
        "patient_id": s.patient_id,
        "appointment_id": s.appointment_id,
        "survey_type": s.survey_type,
        "questions": s.questions,
        "responses": s.responses,
        "completed_at": _iso(s.completed_at),
    }


def _by_patient(query, model):
    patient_id = request.args.get("patient_id", type=int)
    if patient_id is not None:
        query = query.filter(model.patient_id == patient_id)
    return query.order_by(model.id).all()


def _save(obj, label):
    """Grava um registro novo; devolve a resposta de erro ou None."""
    try:
        db.session.add(obj)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao registrar {label}: {e}")
        return {"message": f"Erro ao registrar {label}.", "error": str(e)}, 500
    logger.info(f"Registro {label} {obj.id} criado")
    return None


@engagement_ns.route("/health")
class HealthTrackingList(AdminResource):
    def get(self, current_admin):
        entries = _by_patient(HealthTracking.query, HealthTracking)
        return {"health_tracking": [health_to_dict(h) for h in entries], "count": len(entries)}, 200

    @engagement_ns.expect(health_model, validate=True)
    def post(self, current_admin):
        """Registra uma medição; o formato de 'value' depende do tipo."""
        entry = HealthTracking(**clean_health_tracking(request.get_json()))
        error = _save(entry, "dados de saúde")
        if error:
            return error
        return {"message": "Dados de saúde registrados com sucesso!", "id": entry.id}, 201


@engagement_ns.route("/medications")
class MedicationScheduleList(AdminResource):
    def get(self, current_admin):
        schedules = _by_patient(MedicationSchedule.query, MedicationSchedule)
        return {"medications": [medication_to_dict(m) for m in schedules], "count": len(schedules)}, 200

    @engagement_ns.expect(medication_model, validate=True)
    def post(self, current_admin):
        schedule = MedicationSchedule(**clean_medication_schedule(request.get_json()))
        error = _save(schedule, "medicação")
        if error:
            return error
        return {"message": "Medicação agendada com sucesso!", "id": schedule.id}, 201


@engagement_ns.route("/medications/<int:id>/active")
class MedicationActive(AdminResource):
    @engagement_ns.expect(active_model, validate=True)
    def put(self, current_admin, id):
        schedule = MedicationSchedule.query.filter_by(id=id).first_or_404()
        schedule.is_active = request.get_json()["is_active"]
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao atualizar medicação {id}: {e}")
            return {"message": "Erro ao atualizar medicação.", "error": str(e)}, 500
        return {"id": schedule.id, "is_active": schedule.is_active}, 200


@engagement_ns.route("/notifications")
class NotificationScheduleList(AdminResource):
    def get(self, current_admin):
        notifications = _by_patient(NotificationSchedule.query, NotificationSchedule)
        return {
            "notifications": [notification_to_dict(n) for n in notifications],
            "count": len(notifications),
        }, 200

    @engagement_ns.expect(notification_model, validate=True)
    def post(self, current_admin):
        """
        Agenda um lembrete. Fica 'pending': nenhum processo o envia.
        """
        notification = NotificationSchedule(**clean_notification(request.get_json()))
        error = _save(notification, "notificação")
        if error:
            return error
        return {"message": "Notificação agendada com sucesso!", "id": notification.id}, 201


@engagement_ns.route("/notifications/<int:id>/link")
class NotificationLink(AdminResource):
    def get(self, current_admin, id):
        """Deep link do lembrete para o canal escolhido."""
        notification = NotificationSchedule.query.filter_by(id=id).first_or_404()
        patient = None
        if notification.patient_id:
            patient = Patient.query.filter_by(id=notification.patient_id).first()
        if patient is None:
            return {"message": "Lembrete sem paciente vinculado."}, 400

        method = notification.delivery_method
        recipient = patient.email if method == "email" else patient.phone
        if not recipient:
            return {"message": f"Paciente sem contato para {method}."}, 400
        return {
            "channel": method,
            "url": build_link(method, recipient, notification.message_content),
        }, 200


@engagement_ns.route("/surveys")
class SurveyList(AdminResource):
    def get(self, current_admin):
        surveys = _by_patient(PatientSurvey.query, PatientSurvey)
        return {"surveys": [survey_to_dict(s) for s in surveys], "count": len(surveys)}, 200

    @engagement_ns.expect(survey_model, validate=True)
    def post(self, current_admin):
        survey = PatientSurvey(**clean_survey(request.get_json(), SURVEY_TEMPLATES))
        error = _save(survey, "questionário")
        if error:
            return error
        return {"message": "Questionário criado com sucesso!", "id": survey.id}, 201


@engagement_ns.route("/surveys/<int:id>/responses")
class SurveyResponses(AdminResource):
    @engagement_ns.expect(survey_response_model, validate=True)
    def post(self, current_admin, id):
        """Grava as respostas e marca o questionário como concluído."""
        survey = PatientSurvey.query.filter_by(id=id).first_or_404()
        survey.responses = request.get_json()["responses"]
        survey.completed_at = datetime.datetime.utcnow()
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao enviar questionário {id}: {e}")
            return {"message": "Erro ao enviar questionário.", "error": str(e)}, 500
        return {"message": "Questionário enviado com sucesso!", "completed_at": survey.completed_at.isoformat()}, 200


@engagement_ns.route("/surveys/templates/<string:survey_type>")
class SurveyTemplate(Resource):
    def get(self, survey_type):
        if survey_type not in SURVEY_TEMPLATES:
            return {"message": "Tipo de questionário desconhecido."}, 404
        return {"survey_type": survey_type, "questions": SURVEY_TEMPLATES[survey_type]}, 200
