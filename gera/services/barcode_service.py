"""
Barcode service — builds the barcode descriptors for each card type.

    boleto   -> Code128 + QR, both carrying the digits of the digitable line
    picpay   -> QR with the picpay.me link (plus "/<value>" when a value is given)
    nubank   -> QR with the Nubank link, as sent
    febraban -> QR with a bank / agency / account summary

All messages are Latin-1 encoded (BARCODE_MESSAGE_ENCODING in gera.passkit).
"""

import re
from collections.abc import Callable
from typing import Any

from wallet.models import Barcode, BarcodeFormat

from gera.passkit import BARCODE_MESSAGE_ENCODING
from gera.schemas.card import (
    BoletoRecord,
    CardRecordBase,
    CardType,
    FebrabanRecord,
    NubankRecord,
    PicPayRecord,
)

PICPAY_BASE_URL = "https://picpay.me"
FEBRABAN_ALT_TEXT = "Aponte a câmera ⬆️"

_NON_DIGITS = re.compile(r"\D+")


def _barcode(message: str, format: str, alt_text: str) -> Barcode:
    return Barcode(
        message=message,
        format=format,
        altText=alt_text,
        messageEncoding=BARCODE_MESSAGE_ENCODING,
    )


def url_segment(value: Any) -> str:
    """
    Render a record value as a URL path segment.

    A JSON number written 100.0 decodes to a float and is written back
    as 100. Booleans are written in lower case.
    """
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def boleto_barcodes(record: BoletoRecord) -> list[Barcode]:
    digitable_line = str(record.boleto_digitable_line)
    digits = _NON_DIGITS.sub("", digitable_line)
    return [
        _barcode(digits, BarcodeFormat.CODE128, digitable_line),
        _barcode(digits, BarcodeFormat.QR, digitable_line),
    ]


def picpay_url(record: PicPayRecord) -> str:
    url = f"{PICPAY_BASE_URL}/{record.picpay_user}"
    if record.value:
        url += f"/{url_segment(record.value)}"
    return url


def picpay_barcodes(record: PicPayRecord) -> list[Barcode]:
    url = picpay_url(record)
    return [_barcode(url, BarcodeFormat.QR, url)]


def nubank_barcodes(record: NubankRecord) -> list[Barcode]:
    url = str(record.nubank_url)
    return [_barcode(url, BarcodeFormat.QR, url)]


def febraban_barcodes(record: FebrabanRecord) -> list[Barcode]:
    summary = (
        f"{record.bank_code} - {record.bank_name}\n"
        f"Ag. {record.agency_number}\n"
        f"Conta {record.account_number}"
    )
    return [_barcode(summary, BarcodeFormat.QR, FEBRABAN_ALT_TEXT)]


BARCODE_BUILDERS: dict[CardType, Callable[..., list[Barcode]]] = {
    CardType.BOLETO: boleto_barcodes,
    CardType.PICPAY: picpay_barcodes,
    CardType.NUBANK: nubank_barcodes,
    CardType.FEBRABAN: febraban_barcodes,
}


def generate_barcodes(record: CardRecordBase) -> list[Barcode]:
    """Return the barcode descriptors for a validated record."""
    return BARCODE_BUILDERS[record.card_type](record)
