"""
Cards router — wallet pass issuance and retrieval.

Endpoints:
  POST /card/       — Issue a pass for a card record, answer the .pkpass archive
                      (also accepted without the trailing slash)
  GET  /card/{uid}  — Answer a previously issued archive again

Failures answer 400 with {"message", "error"} (see gera.exceptions),
including an unknown serial number on retrieval.
"""

from typing import Any

import httpx
from fastapi import APIRouter, Body, Depends, Response

from gera.config import settings
from gera.dependencies import get_http_client, get_pass_store, get_pass_template
from gera.passkit import PASS_MIME_TYPE, PassTemplate
from gera.schemas.card import ErrorResponse
from gera.services import pass_service
from gera.services.pass_store import PassStore

router = APIRouter()

_PASS_RESPONSES = {
    200: {"content": {PASS_MIME_TYPE: {}}, "description": "Signed wallet pass"},
    400: {"model": ErrorResponse},
}


@router.post("", response_class=Response, include_in_schema=False)
@router.post(
    "/",
    response_class=Response,
    responses=_PASS_RESPONSES,
    summary="Issue a wallet pass",
)
async def create_card(
    payload: dict[str, Any] | None = Body(default=None),
    template: PassTemplate = Depends(get_pass_template),
    store: PassStore = Depends(get_pass_store),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Issue a new wallet pass for a boleto, PicPay, Nubank or Febraban record.

    - **type**, **message**, **recipientName**, **recipientPhoneNumber** are always required
    - boleto: **value**, **boletoDigitableLine** and **cpf** or **cnpj**
    - picpay: **picpayUser**
    - nubank: **nubankUrl**
    - febraban: **bankCode**, **bankName**, **agencyNumber**, **accountNumber**,
      **accountType** and **cpf** or **cnpj**
    - optional: **value**, **imageUrl**, **backgroundColor**, **foregroundColor**
    """
    serial_number, archive = await pass_service.create_pass(
        payload or {},
        template=template,
        store=store,
        http_client=http_client,
        settings=settings,
    )
    return Response(
        content=archive,
        media_type=PASS_MIME_TYPE,
        headers={"X-Pass-Serial-Number": serial_number},
    )


@router.get(
    "/{uid}",
    response_class=Response,
    responses=_PASS_RESPONSES,
    summary="Retrieve an issued wallet pass",
)
async def get_card(
    uid: str,
    store: PassStore = Depends(get_pass_store),
):
    """Answer the archive issued under this serial number, byte for byte."""
    archive = await pass_service.get_pass(store, uid)
    return Response(content=archive, media_type=PASS_MIME_TYPE)
