"""
Field mapper — fills the display fields and colors of a pass from a record.

Front of the pass:
  - Primary field: the amount (BRL) when the record carries a numeric,
    non-zero value; otherwise the PicPay user for PicPay cards; otherwise
    the recipient name. Exactly one of these rules applies.
  - Secondary field: the free-text message, left aligned.

Back of the pass:
  - One field per record key found in BACK_LABELS, in the order the keys
    appear in the record, value copied verbatim
  - A final support contact field with the service's contact e-mail

Values are never transformed or escaped here; the validator only checks
that required keys exist.
"""

import math
from typing import Any

from wallet.models import Alignment, CurrencyField, Field

from gera.passkit import GeraPass
from gera.schemas.card import CardRecordBase, CardType

DEFAULT_BACKGROUND_COLOR = "rgb(154, 69, 215)"
DEFAULT_FOREGROUND_COLOR = "rgb(255, 255, 255)"

CURRENCY_CODE = "BRL"
SUPPORT_FIELD_KEY = "supportMail"
SUPPORT_FIELD_LABEL = "Suporte do App Gera"

# Record key -> label shown on the back of the pass
BACK_LABELS: dict[str, str] = {
    "picpayUser": "Usuário do PicPay",
    "bankCode": "Código do banco",
    "bankName": "Nome do banco",
    "agencyNumber": "Número da agência",
    "accountNumber": "Número da conta",
    "accountType": "Tipo de conta",
    "recipientName": "Nome de destinatário",
    "recipientPhoneNumber": "Contato de destinatário",
    "boletoDigitableLine": "Linha digitável",
    "cpf": "CPF",
    "cnpj": "CNPJ",
}


def numeric_value(value: Any) -> int | float | None:
    """
    Interpret a record value as an amount.

    Numbers and numeric strings are accepted. Zero, NaN, booleans and
    anything unparseable yield None, so the primary field falls back to
    the next rule. Integral amounts are returned as int.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number == 0 or math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def fill_primary_field(pass_: GeraPass, record: CardRecordBase) -> GeraPass:
    fields = pass_.passInformation.primaryFields
    amount = numeric_value(record.value)
    if amount is not None:
        fields.append(CurrencyField("value", amount, "Valor", currencyCode=CURRENCY_CODE))
    elif record.card_type is CardType.PICPAY:
        fields.append(Field("value", record.picpay_user, "Usuário do PicPay"))
    else:
        fields.append(Field("value", record.recipient_name, "Destinatário"))
    return pass_


def fill_secondary_field(pass_: GeraPass, message: Any) -> GeraPass:
    field = Field("message", message, "Mensagem")
    field.textAlignment = Alignment.LEFT
    pass_.passInformation.secondaryFields.append(field)
    return pass_


def fill_back_fields(pass_: GeraPass, record: CardRecordBase, contact_email: str) -> GeraPass:
    """Add a back field per labelled record key, then the support contact."""
    info = pass_.passInformation
    for key, value in record.present_fields().items():
        if key in BACK_LABELS:
            info.addBackField(key, value, BACK_LABELS[key])

    info.addBackField(SUPPORT_FIELD_KEY, contact_email, SUPPORT_FIELD_LABEL)
    return pass_


def personalize_card(pass_: GeraPass, record: CardRecordBase) -> GeraPass:
    """Apply record colors, falling back to the Gera palette."""
    pass_.backgroundColor = (
        record.background_color
        if record.background_color is not None
        else DEFAULT_BACKGROUND_COLOR
    )
    pass_.foregroundColor = (
        record.foreground_color
        if record.foreground_color is not None
        else DEFAULT_FOREGROUND_COLOR
    )
    return pass_
