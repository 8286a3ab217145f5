"""
Campos extras para os modelos do flask-restx.

Os campos padrão geram um JSON Schema que recusa null em campos opcionais
e exige objeto em fields.Raw. Estes aceitam o que a API realmente grava.
"""
from flask_restx import fields


class AnyValue(fields.Raw):
    """Qualquer valor JSON: objeto, lista, número, texto ou booleano."""
    __schema_type__ = None


class NullableString(fields.String):
    __schema_type__ = ["string", "null"]


class NullableInteger(fields.Integer):
    __schema_type__ = ["integer", "null"]
