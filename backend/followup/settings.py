import logging

from flask import request, current_app
from flask_restx import Namespace, fields
from sqlalchemy.exc import SQLAlchemyError

from .models import AppSetting
from . import db
from .auth import AdminResource
from .validators import clean_doctor_name

logger = logging.getLogger(__name__)

settings_ns = Namespace("settings", description="Preferências da aplicação")

DOCTOR_NAME_KEY = "doctor_name"

settings_model = settings_ns.model("Settings", {
    "doctor_name": fields.String(required=True, min_length=1, description="Nome exibido do médico"),
})


def get_doctor_name():
    setting = AppSetting.query.filter_by(key=DOCTOR_NAME_KEY).first()
    return setting.value if setting else current_app.config["DEFAULT_DOCTOR_NAME"]


@settings_ns.route("/")
class Settings(AdminResource):
    def get(self, current_admin):
        return {"doctor_name": get_doctor_name()}, 200

    @settings_ns.expect(settings_model, validate=True)
    def put(self, current_admin):
        doctor_name = clean_doctor_name(request.get_json())["doctor_name"]
        setting = AppSetting.query.filter_by(key=DOCTOR_NAME_KEY).first()
        if setting is None:
            setting = AppSetting(key=DOCTOR_NAME_KEY, value=doctor_name)
            db.session.add(setting)
        else:
            setting.value = doctor_name
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao salvar nome do médico: {e}")
            return {"message": "Erro ao salvar configurações.", "error": str(e)}, 500

        logger.info(f"Nome do médico alterado para {doctor_name!r}")
        return {"message": "Configurações salvas!", "doctor_name": doctor_name}, 200
