import os
import datetime
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///followup.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_ACCESS_TOKEN_EXPIRES = datetime.timedelta(
        hours=int(os.getenv("JWT_EXPIRES_HOURS", "24"))
    )

    # Credenciais do administrador criado na inicialização
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "doctor12/")

    DEFAULT_DOCTOR_NAME = os.getenv("DEFAULT_DOCTOR_NAME", "Dr. Sarah Mitchell")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = os.getenv("LOGIN_RATE_LIMIT", "10 per minute")

    # Cria tabelas e administrador ao montar a aplicação
    AUTO_INIT_DB = os.getenv("AUTO_INIT_DB", "true").lower() == "true"

    RESTX_MASK_SWAGGER = False
    RESTX_ERROR_404_HELP = False

class DevConfig(Config):
    DEBUG = True

class ProdConfig(Config):
    DEBUG = False

class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATELIMIT_ENABLED = False
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "doctor12/"
    DEFAULT_DOCTOR_NAME = "Dr. Sarah Mitchell"
    BCRYPT_LOG_ROUNDS = 4
