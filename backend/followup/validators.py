"""
Validação dos formulários antes de qualquer escrita no banco.
Cada função clean_* devolve um dict pronto para o modelo ou levanta
ValidationError com os erros por campo.
"""
import datetime
import re

from flask import request

from .models import (
    RISK_LEVELS, APPOINTMENT_STATUSES, SURVEY_TYPES, DELIVERY_METHODS, NOTIFICATION_TYPES, MAX_POINTS,
)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ValidationError(Exception):
    """Erros de campo; nunca chega ao banco."""

    def __init__(self, errors):
        super().__init__("Dados inválidos")
        self.errors = errors


def require_text(data, field, errors=None, message="Campo obrigatório"):
    value = data.get(field)
    if isinstance(value, str):
        value = value.strip()
    if not value:
        if errors is None:
            raise ValidationError({field: message})
        errors[field] = message
        return None
    return value


def optional_text(data, field):
    """Strings vazias viram None."""
    value = data.get(field)
    if isinstance(value, str):
        value = value.strip()
    return value or None


def parse_date(data, field, errors, required=True):
    value = data.get(field)
    if not value:
        if required:
            errors[field] = "Campo obrigatório"
        return None
    try:
        return datetime.date.fromisoformat(value)
    except (TypeError, ValueError):
        errors[field] = "Data inválida (use YYYY-MM-DD)"
        return None


def parse_datetime(data, field, errors):
    value = data.get(field)
    if not value:
        errors[field] = "Campo obrigatório"
        return None
    try:
        return datetime.datetime.fromisoformat(value)
    except (TypeError, ValueError):
        errors[field] = "Data/hora inválida (use ISO 8601)"
        return None


def choice(data, field, allowed, errors, default=None):
    value = data.get(field) or default
    if value not in allowed:
        errors[field] = "Valor deve ser um de: " + ", ".join(allowed)
    return value


def _raise_if(errors):
    if errors:
        raise ValidationError(errors)


def clean_patient(data):
    errors = {}
    cleaned = {
        "first_name": require_text(data, "first_name", errors, "Nome é obrigatório"),
        "last_name": require_text(data, "last_name", errors, "Sobrenome é obrigatório"),
        "code_number": require_text(data, "code_number", errors, "Código do paciente é obrigatório"),
        "phone": optional_text(data, "phone"),
        "email": optional_text(data, "email"),
        "condition": optional_text(data, "condition"),
        "risk_level": choice(data, "risk_level", RISK_LEVELS, errors, default="low"),
    }
    if cleaned["email"] and not EMAIL_RE.match(cleaned["email"]):
        errors["email"] = "E-mail inválido"
    _raise_if(errors)
    return cleaned


def clean_appointment(data):
    errors = {}
    appointment_date = parse_date(data, "date", errors)
    cleaned = {
        "patient_id": data.get("patient_id"),
        "date": appointment_date.isoformat() if appointment_date else None,
        # Hora é texto livre, sem conversão
        "time": require_text(data, "time", errors, "Hora é obrigatória"),
        "type": require_text(data, "type", errors, "Tipo da consulta é obrigatório"),
        "status": choice(data, "status", APPOINTMENT_STATUSES, errors, default="pending"),
    }
    if cleaned["patient_id"] is None:
        errors["patient_id"] = "Paciente é obrigatório"
    _raise_if(errors)
    return cleaned


def clean_reward(data):
    errors = {}
    points = data.get("points")
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        errors["points"] = "Pontos devem ser um inteiro positivo"
    elif points > MAX_POINTS:
        errors["points"] = f"Pontos devem ser no máximo {MAX_POINTS}"
    cleaned = {
        "patient_id": data.get("patient_id"),
        "points": points,
        "action": require_text(data, "action", errors, "Ação é obrigatória"),
    }
    if cleaned["patient_id"] is None:
        errors["patient_id"] = "Paciente é obrigatório"
    _raise_if(errors)
    return cleaned


def clean_health_tracking(data):
    errors = {}
    cleaned = {
        "patient_id": data.get("patient_id"),
        "tracking_type": require_text(data, "tracking_type", errors),
        "value": data.get("value"),
        "notes": optional_text(data, "notes"),
    }
    if cleaned["value"] is None:
        errors["value"] = "Campo obrigatório"
    if data.get("recorded_at"):
        cleaned["recorded_at"] = parse_datetime(data, "recorded_at", errors)
    _raise_if(errors)
    return cleaned


def clean_reminder_times(times, errors):
    """Remove horários repetidos mantendo a ordem."""
    output = []
    for value in times or []:
        if not isinstance(value, str) or not TIME_OF_DAY_RE.match(value):
            errors["reminder_times"] = f"Horário inválido: {value} (use HH:MM)"
            continue
        if value not in output:
            output.append(value)
    return output


def clean_medication_schedule(data):
    errors = {}
    cleaned = {
        "patient_id": data.get("patient_id"),
        "medication_name": require_text(data, "medication_name", errors),
        "dosage": require_text(data, "dosage", errors),
        "frequency": require_text(data, "frequency", errors),
        "start_date": parse_date(data, "start_date", errors),
        "end_date": parse_date(data, "end_date", errors, required=False),
        "reminder_times": clean_reminder_times(data.get("reminder_times"), errors),
        "notes": optional_text(data, "notes"),
    }
    if cleaned["start_date"] and cleaned["end_date"] and cleaned["end_date"] < cleaned["start_date"]:
        errors["end_date"] = "Data final anterior à data inicial"
    _raise_if(errors)
    return cleaned


def clean_notification(data):
    errors = {}
    cleaned = {
        "patient_id": data.get("patient_id"),
        "appointment_id": data.get("appointment_id"),
        "medication_schedule_id": data.get("medication_schedule_id"),
        "notification_type": choice(data, "notification_type", NOTIFICATION_TYPES, errors),
        "delivery_method": choice(data, "delivery_method", DELIVERY_METHODS, errors, default="sms"),
        "scheduled_time": parse_datetime(data, "scheduled_time", errors),
        "message_content": require_text(data, "message_content", errors),
    }
    _raise_if(errors)
    return cleaned


def clean_survey(data, templates):
    errors = {}
    survey_type = choice(data, "survey_type", SURVEY_TYPES, errors)
    questions = data.get("questions")
    if not questions and survey_type in templates:
        questions = templates[survey_type]
    cleaned = {
        "patient_id": data.get("patient_id"),
        "appointment_id": data.get("appointment_id"),
        "survey_type": survey_type,
        "questions": questions,
    }
    _raise_if(errors)
    return cleaned


def delete_confirmed():
    """Exclusões exigem ?confirm=true explícito."""
    return request.args.get("confirm", "").lower() in ("1", "true", "yes")


def clean_doctor_name(data):
    return {"doctor_name": require_text(data, "doctor_name", message="Nome do médico é obrigatório")}
