"""
Atalhos de mensagem: monta URIs (WhatsApp, SMS, e-mail) para o cliente abrir.
Nada é enviado nem registrado pelo servidor.
"""
import re
from urllib.parse import quote

from flask import request
from flask_restx import Namespace, fields

from .auth import AdminResource
from .schema_fields import NullableString
from .models import Patient, DELIVERY_METHODS
from .validators import ValidationError, optional_text, require_text

messages_ns = Namespace("messages", description="Atalhos de mensagem (deep links)")

DEFAULT_EMAIL_SUBJECT = "Health Tracker Message"

link_model = messages_ns.model("MessageLink", {
    "channel": fields.String(required=True, enum=list(DELIVERY_METHODS), description="sms, whatsapp ou email"),
    "recipient": fields.String(required=True, min_length=1, description="Telefone ou e-mail"),
    "message": NullableString(description="Texto da mensagem"),
    "subject": NullableString(description="Assunto (apenas e-mail)"),
})

patient_message_model = messages_ns.model("PatientMessage", {
    "method": fields.String(enum=["all"] + list(DELIVERY_METHODS), description="Canal ou 'all'"),
    "message": fields.String(required=True, min_length=1, description="Texto da mensagem"),
})


def whatsapp_link(phone, message=None):
    url = "https://wa.me/" + re.sub(r"\D", "", phone)
    if message:
        url += "?text=" + quote(message, safe="")
    return url


def sms_link(number, message=None):
    url = "sms:" + number
    if message:
        url += "?body=" + quote(message, safe="")
    return url


def email_link(address, message=None, subject=None):
    url = "mailto:" + address
    if message:
        url += "?subject={}&body={}".format(
            quote(subject or DEFAULT_EMAIL_SUBJECT, safe=""),
            quote(message, safe=""),
        )
    return url


def build_link(channel, recipient, message=None, subject=None):
    if channel == "whatsapp":
        return whatsapp_link(recipient, message)
    if channel == "sms":
        return sms_link(recipient, message)
    if channel == "email":
        return email_link(recipient, message, subject)
    raise ValidationError({"channel": f"Canal desconhecido: {channel}"})


def patient_links(patient, method, message):
    """Links para cada canal em que o paciente tem contato cadastrado."""
    channels = DELIVERY_METHODS if method == "all" else (method,)
    links = []
    for channel in channels:
        recipient = patient.email if channel == "email" else patient.phone
        if recipient:
            links.append({"channel": channel, "url": build_link(channel, recipient, message)})
    return links


@messages_ns.route("/link")
class MessageLink(AdminResource):
    @messages_ns.expect(link_model, validate=True)
    def post(self, current_admin):
        """Monta o deep link para um destinatário avulso."""
        data = request.get_json()
        recipient = require_text(data, "recipient")
        url = build_link(
            data["channel"],
            recipient,
            optional_text(data, "message"),
            optional_text(data, "subject"),
        )
        return {"channel": data["channel"], "url": url}, 200


@messages_ns.route("/patient/<int:id>")
class PatientMessageLinks(AdminResource):
    @messages_ns.expect(patient_message_model, validate=True)
    def post(self, current_admin, id):
        """Links de mensagem para os contatos do paciente."""
        patient = Patient.query.filter_by(id=id).first_or_404()
        data = request.get_json()
        message = require_text(data, "message")
        links = patient_links(patient, data.get("method") or "all", message)
        return {"patient_id": patient.id, "links": links, "count": len(links)}, 200
