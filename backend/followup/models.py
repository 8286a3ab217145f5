import datetime
from . import db

RISK_LEVELS = ("low", "medium", "high")
APPOINTMENT_STATUSES = ("pending", "completed", "cancelled")
SURVEY_TYPES = ("pre_appointment", "post_appointment", "general_health")
DELIVERY_METHODS = ("sms", "whatsapp", "email")
NOTIFICATION_TYPES = ("appointment_reminder", "medication_reminder", "survey_reminder")

# Maior valor aceito pela coluna INTEGER (32 bits)
MAX_POINTS = 2147483647

# Excluir um paciente mantém os registros dependentes, apenas sem vínculo.
PATIENT_FK = "patient.id"


class Patient(db.Model):
    __tablename__ = "patient"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    code_number = db.Column(db.String(50), unique=True, nullable=False)
    phone = db.Column(db.String(30))
    email = db.Column(db.String(120))
    condition = db.Column(db.String(200))
    risk_level = db.Column(db.String(10), nullable=False, default="low")
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"


class Appointment(db.Model):
    __tablename__ = "appointment"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    # Data ISO (yyyy-MM-dd) guardada como texto; a hora é texto livre.
    date = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(20), nullable=False)
    type = db.Column(db.String(100))
    status = db.Column(db.String(20), nullable=False, default="pending")
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class Reward(db.Model):
    __tablename__ = "reward"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    points = db.Column(db.Integer, nullable=False)
    action = db.Column(db.String(100))
    date = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class HealthTracking(db.Model):
    __tablename__ = "health_tracking"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    tracking_type = db.Column(db.String(50), nullable=False)
    value = db.Column(db.JSON, nullable=False)
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class MedicationSchedule(db.Model):
    __tablename__ = "medication_schedule"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    medication_name = db.Column(db.String(100), nullable=False)
    dosage = db.Column(db.String(100), nullable=False)
    frequency = db.Column(db.String(100), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date)
    reminder_times = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)


class NotificationSchedule(db.Model):
    __tablename__ = "notification_schedule"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointment.id", ondelete="SET NULL"))
    medication_schedule_id = db.Column(
        db.Integer, db.ForeignKey("medication_schedule.id", ondelete="SET NULL")
    )
    notification_type = db.Column(db.String(50), nullable=False)
    delivery_method = db.Column(db.String(20), nullable=False)
    scheduled_time = db.Column(db.DateTime, nullable=False)
    message_content = db.Column(db.Text, nullable=False)
    # Nenhum despachante altera o status; as linhas ficam como fila pendente.
    status = db.Column(db.String(20), nullable=False, default="pending")
    sent_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class PatientSurvey(db.Model):
    __tablename__ = "patient_survey"

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey(PATIENT_FK, ondelete="SET NULL"))
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointment.id", ondelete="SET NULL"))
    survey_type = db.Column(db.String(30), nullable=False)
    questions = db.Column(db.JSON, nullable=False)
    responses = db.Column(db.JSON)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)


class AdminUser(db.Model):
    __tablename__ = "admin_user"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class RevokedToken(db.Model):
    __tablename__ = "revoked_token"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), unique=True, nullable=False)
    revoked_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class AppSetting(db.Model):
    __tablename__ = "app_setting"

    key = db.Column(db.String(50), primary_key=True)
    value = db.Column(db.String(200), nullable=False)
