"""
Pydantic schemas for card records.

A card record is the JSON body of POST /card/. Its "type" selects one of
four schemas; each schema lists its required fields as non-optional members,
so a validated record is always complete for its type.

Required fields are typed Any: the API checks that they are present, not
what they contain. Values are carried verbatim into the pass.

Request keys are camelCase (recipientName, boletoDigitableLine, ...);
attributes are snake_case through the alias generator. Only the camelCase
key satisfies a field: a snake_case key is an unknown key. Unknown keys are
kept as extras so back fields can still pick them up.
"""

import enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel


class CardType(str, enum.Enum):
    PICPAY = "picpay"
    BOLETO = "boleto"
    NUBANK = "nubank"
    FEBRABAN = "febraban"


class CardRecordBase(BaseModel):
    """Fields every card record carries, whatever its type."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="allow",
    )

    # Either document satisfies the requirement; checked by card_validator
    requires_tax_id: ClassVar[bool] = False

    message: Any
    recipient_name: Any
    recipient_phone_number: Any

    value: Any = None
    image_url: Any = None
    background_color: Any = None
    foreground_color: Any = None
    cpf: Any = None
    cnpj: Any = None

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler):
        record = handler(data)
        if isinstance(data, dict):
            record._key_order = list(data)
        return record

    @property
    def card_type(self) -> CardType:
        return CardType(self.type)

    def present_fields(self) -> dict[str, Any]:
        """Request keys that were actually sent, with their values, in request order."""
        sent = self.model_dump(by_alias=True, exclude_unset=True)
        return {key: sent[key] for key in self._key_order if key in sent}


class BoletoRecord(CardRecordBase):
    """Brazilian bank slip, identified by its digitable line."""
    requires_tax_id: ClassVar[bool] = True

    type: Literal["boleto"]
    value: Any
    boleto_digitable_line: Any


class PicPayRecord(CardRecordBase):
    """PicPay wallet user."""
    type: Literal["picpay"]
    picpay_user: Any


class NubankRecord(CardRecordBase):
    """Nubank payment link."""
    type: Literal["nubank"]
    nubank_url: Any


class FebrabanRecord(CardRecordBase):
    """Plain bank transfer details (agency and account)."""
    requires_tax_id: ClassVar[bool] = True

    type: Literal["febraban"]
    bank_code: Any
    bank_name: Any
    agency_number: Any
    account_number: Any
    account_type: Any


RECORD_SCHEMAS: dict[CardType, type[CardRecordBase]] = {
    CardType.BOLETO: BoletoRecord,
    CardType.PICPAY: PicPayRecord,
    CardType.NUBANK: NubankRecord,
    CardType.FEBRABAN: FebrabanRecord,
}


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing card route."""
    message: str
    error: str
    missingFields: list[str] | None = None
