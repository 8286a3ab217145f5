import datetime
import logging
import uuid
from dataclasses import dataclass

import jwt
from flask import request, current_app
from flask_restx import Namespace, fields, Resource
from sqlalchemy.exc import SQLAlchemyError

from .models import AdminUser, RevokedToken
from . import db, bcrypt, limiter

logger = logging.getLogger(__name__)

auth_ns = Namespace("auth", description="Acesso à área administrativa")

login_model = auth_ns.model("Login", {
    "username": fields.String(required=True, description="Usuário"),
    "password": fields.String(required=True, description="Senha")
})


class AuthError(Exception):
    pass


@dataclass
class AdminSession:
    admin_id: int
    username: str
    jti: str


class Authenticator:
    """Interface de autenticação: credenciais -> AdminSession ou AuthError."""

    def authenticate(self, username, password):
        raise NotImplementedError


class StoredCredentialAuthenticator(Authenticator):
    """Compara com os administradores cadastrados (hash bcrypt)."""

    def authenticate(self, username, password):
        admin = AdminUser.query.filter_by(username=username).first()
        if not admin or not bcrypt.check_password_hash(admin.password, password):
            raise AuthError("Credenciais inválidas")
        return AdminSession(admin_id=admin.id, username=admin.username, jti=str(uuid.uuid4()))


authenticator = StoredCredentialAuthenticator()


def issue_token(session):
    return jwt.encode({
        "id": session.admin_id,
        "jti": session.jti,
        "exp": datetime.datetime.utcnow() + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    }, current_app.config["SECRET_KEY"], algorithm="HS256")


def session_from_token(token):
    try:
        data = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        raise AuthError(str(e)) from e
    if RevokedToken.query.filter_by(jti=data.get("jti")).first():
        raise AuthError("Sessão encerrada")
    admin = AdminUser.query.filter_by(id=data.get("id")).first()
    if not admin:
        raise AuthError("Administrador não encontrado")
    return AdminSession(admin_id=admin.id, username=admin.username, jti=data["jti"])


def ensure_default_admin():
    """Cria o administrador padrão da configuração, se ainda não existir."""
    username = current_app.config["ADMIN_USERNAME"]
    if AdminUser.query.filter_by(username=username).first():
        return False
    hashed_pw = bcrypt.generate_password_hash(current_app.config["ADMIN_PASSWORD"]).decode("utf-8")
    db.session.add(AdminUser(username=username, password=hashed_pw))
    db.session.commit()
    logger.info(f"Administrador padrão criado: {username}")
    return True


class AdminResource(Resource):
    """
    Recurso protegido: o token é verificado antes da validação do payload,
    então uma requisição sem sessão recebe 401 e nunca 400.
    Os métodos recebem a sessão como parâmetro current_admin.
    """

    def dispatch_request(self, *args, **kwargs):
        token = request.headers.get("x-access-token")
        if not token:
            return {"message": "Token está faltando!"}, 401
        try:
            current_admin = session_from_token(token)
        except AuthError as e:
            return {"message": "Token inválido!", "error": str(e)}, 401
        return super().dispatch_request(*args, current_admin=current_admin, **kwargs)


def _login_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


@auth_ns.route("/login")
class Login(Resource):
    decorators = [limiter.limit(_login_limit)]

    @auth_ns.expect(login_model, validate=True)
    def post(self):
        data = request.get_json()
        try:
            session = authenticator.authenticate(data["username"], data["password"])
        except AuthError:
            logger.info(f"Falha de login para {data['username']!r}")
            return {"message": "Credenciais inválidas!", "logged_in": False}, 401

        logger.info(f"Administrador {session.username} autenticado")
        return {
            "token": issue_token(session),
            "logged_in": True,
            "admin": {"id": session.admin_id, "username": session.username}
        }, 200


@auth_ns.route("/logout")
class Logout(AdminResource):
    def post(self, current_admin):
        """Encerra a sessão revogando o token atual."""
        try:
            db.session.add(RevokedToken(jti=current_admin.jti))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Erro ao encerrar sessão de {current_admin.username}: {e}")
            return {"message": "Erro ao encerrar sessão.", "error": str(e)}, 500
        return {"message": "Sessão encerrada.", "logged_in": False}, 200


@auth_ns.route("/session")
class SessionState(Resource):
    def get(self):
        """Estado da sessão; token ausente ou inválido significa deslogado."""
        logged_out = {"logged_in": False, "username": None}
        token = request.headers.get("x-access-token")
        if not token:
            return logged_out, 200
        try:
            session = session_from_token(token)
        except AuthError:
            return logged_out, 200
        return {"logged_in": True, "username": session.username}, 200
