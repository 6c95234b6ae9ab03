"""
Card validator — classifies an inbound record and checks its required fields.

Classification happens in three steps:
  1. The four common keys (type, message, recipientName, recipientPhoneNumber)
     must be present, whatever the type
  2. "type" must name one of the known card types
  3. The record is parsed into the schema of its type; every missing
     required key is collected, including the cpf/cnpj alternative

The result is one of the closed set of record schemas in gera.schemas.card,
so downstream mapping never sees an unknown or incomplete record.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from gera.exceptions import InvalidCardTypeError, MissingValueOnRequestError
from gera.schemas.card import RECORD_SCHEMAS, CardRecordBase, CardType

COMMON_FIELDS = ("type", "message", "recipientName", "recipientPhoneNumber")
TAX_ID_FIELDS = ("cpf", "cnpj")


def classify(payload: Mapping[str, Any]) -> CardRecordBase:
    """
    Validate a raw request body and return its typed card record.

    Args:
        payload: The decoded JSON object sent by the client.

    Returns:
        A BoletoRecord, PicPayRecord, NubankRecord or FebrabanRecord.

    Raises:
        MissingValueOnRequestError: If a common or type-specific key is absent.
        InvalidCardTypeError: If "type" is not a known card type.
    """
    missing = [field for field in COMMON_FIELDS if field not in payload]
    if missing:
        raise MissingValueOnRequestError(missing)

    try:
        card_type = CardType(payload["type"])
    except (ValueError, TypeError):
        raise InvalidCardTypeError(payload["type"])

    schema = RECORD_SCHEMAS[card_type]
    missing = []
    record = None
    try:
        record = schema.model_validate(dict(payload))
    except ValidationError as exc:
        for error in exc.errors():
            if error["type"] != "missing":
                raise
            missing.append(".".join(str(part) for part in error["loc"]))

    if schema.requires_tax_id and not any(field in payload for field in TAX_ID_FIELDS):
        missing.append("|".join(TAX_ID_FIELDS))

    if missing:
        raise MissingValueOnRequestError(missing)
    return record
