import logging
import os
import sqlite3

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_restx import Api
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import DevConfig, ProdConfig

db = SQLAlchemy()
migrate = Migrate()
bcrypt = Bcrypt()
cors = CORS()
limiter = Limiter(key_func=get_remote_address)

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite só aplica ON DELETE SET NULL com foreign_keys ligado
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()


def init_db():
    """Cria as tabelas e o administrador padrão. Pode ser repetido."""
    from .auth import ensure_default_admin

    try:
        db.create_all()
        ensure_default_admin()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Erro ao criar tabelas: {e}")
        raise
    logger.info("Tabelas criadas com sucesso!")


def create_app(config_object=None):
    app = Flask(__name__)
    if config_object is None:
        env = os.getenv("FLASK_ENV", "development")
        config_object = ProdConfig if env == "production" else DevConfig
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Inicializa extensões
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    limiter.init_app(app)

    # Configurar RESTX (Swagger)
    api = Api(
        app,
        version="1.0",
        title="API de Acompanhamento de Pacientes",
        description="Pacientes, consultas, recompensas, engajamento e atalhos de mensagem",
        doc="/api/docs"
    )

    from .validators import ValidationError

    @api.errorhandler(ValidationError)
    def handle_validation_error(error):
        return {"message": "Dados inválidos.", "errors": error.errors}, 400

    # Registrar Namespaces
    from .auth import auth_ns
    from .patients import patients_ns
    from .appointments import appointments_ns
    from .rewards import rewards_ns
    from .engagement import engagement_ns
    from .messaging import messages_ns
    from .settings import settings_ns
    from .dashboard import dashboard_ns

    api.add_namespace(auth_ns, path="/api/auth")
    api.add_namespace(patients_ns, path="/api/patients")
    api.add_namespace(appointments_ns, path="/api/appointments")
    api.add_namespace(rewards_ns, path="/api/rewards")
    api.add_namespace(engagement_ns, path="/api/engagement")
    api.add_namespace(messages_ns, path="/api/messages")
    api.add_namespace(settings_ns, path="/api/settings")
    api.add_namespace(dashboard_ns, path="/api/dashboard")

    @app.cli.command("init-db")
    def init_db_command():
        """Cria as tabelas e o administrador padrão."""
        init_db()

    if app.config["AUTO_INIT_DB"]:
        with app.app_context():
            init_db()

    return app
