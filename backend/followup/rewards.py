import logging

from flask import request
from flask_restx import Namespace, fields, Resource
from sqlalchemy.exc import SQLAlchemyError

from .models import Reward, Patient, MAX_POINTS
from . import db
from .auth import AdminResource
from .aggregates import filter_rewards, patient_balance, patient_display_name, top_patients
from .validators import clean_reward

logger = logging.getLogger(__name__)

rewards_ns = Namespace("rewards", description="Pontos de recompensa (somente inclusão)")

REWARD_ACTIONS = {
    "appointment_attendance": "Appointment Attendance",
    "medication_adherence": "Medication Adherence",
    "health_goal_achievement": "Health Goal Achievement",
    "referral": "Referral",
    "app_engagement": "App Engagement",
}

reward_model = rewards_ns.model("Reward", {
    "patient_id": fields.Integer(required=True, description="ID do paciente"),
    "points": fields.Integer(required=True, min=1, max=MAX_POINTS, description="Pontos (inteiro positivo)"),
    "action": fields.String(required=True, min_length=1, description="Ação recompensada"),
})


def reward_to_dict(r, patient=None):
    return {
        "id": r.id,
        "patient_id": r.patient_id,
        "patient_name": patient_display_name(patient),
        "points": r.points,
        "action": r.action,
        "date": r.date.isoformat() if r.date else None,
    }


@rewards_ns.route("/")
class RewardList(AdminResource):
    def get(self, current_admin):
        """
        Histórico de recompensas; busca em nome/código do paciente e ação.
        """
        search = request.args.get("search", "", type=str)
        patients_by_id = {p.id: p for p in Patient.query.all()}
        rewards = filter_rewards(Reward.query.order_by(Reward.date.desc()).all(), patients_by_id, search)
        output = [reward_to_dict(r, patients_by_id.get(r.patient_id)) for r in rewards]
        return {"status": "success", "rewards": output, "count": len(output)}, 200

    @rewards_ns.expect(reward_model, validate=True)
    def post(self, current_admin):
        """
        Registra pontos para um paciente. Entradas não podem ser alteradas.
        """
        data = clean_reward(request.get_json())
        new_reward = Reward(**data)
        try:
            db.session.add(new_reward)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao adicionar recompensa ao paciente {data['patient_id']}: {e}")
            return {"message": "Erro ao adicionar recompensa.", "error": str(e)}, 500

        logger.info(f"{new_reward.points} pontos adicionados ao paciente {new_reward.patient_id}")
        return {"message": "Recompensa adicionada com sucesso!", "id": new_reward.id}, 201


@rewards_ns.route("/balance/<int:patient_id>")
class RewardBalance(AdminResource):
    def get(self, current_admin, patient_id):
        """Saldo recalculado como soma do histórico."""
        patient = Patient.query.filter_by(id=patient_id).first_or_404()
        rewards = Reward.query.filter_by(patient_id=patient.id).all()
        return {
            "patient_id": patient.id,
            "patient_name": patient.full_name,
            "points": patient_balance(rewards, patient.id),
            "entries": len(rewards),
        }, 200


@rewards_ns.route("/top")
class TopPatients(AdminResource):
    def get(self, current_admin):
        limit = request.args.get("limit", 4, type=int)
        patients_by_id = {p.id: p for p in Patient.query.all()}
        ranking = top_patients(Reward.query.all(), patients_by_id, limit)
        return {"status": "success", "patients": ranking}, 200


@rewards_ns.route("/actions")
class RewardActions(Resource):
    def get(self):
        """Ações sugeridas no formulário de recompensa."""
        return {"actions": [{"value": k, "label": v} for k, v in REWARD_ACTIONS.items()]}, 200
