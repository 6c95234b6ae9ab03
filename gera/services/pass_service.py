"""
Pass service — issues and retrieves wallet passes.

Issuing a pass from a request body:
  1. The body is classified into a typed card record (card_validator)
  2. A pass is created from the template under a fresh UUID4 serial number
  3. Display fields, colors, barcodes and back fields are filled
  4. The optional thumbnail is downloaded and embedded
  5. The pass is signed and zipped
  6. Only then is the archive registered in the pass store

A failure at any step leaves the store untouched.
"""

import logging
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from gera.config import Settings
from gera.passkit import PassTemplate
from gera.security import PassSigner
from gera.services import barcode_service, field_mapper, image_service
from gera.services.card_validator import classify
from gera.services.pass_store import PassStore

logger = logging.getLogger(__name__)


def build_template(settings: Settings) -> PassTemplate:
    """
    Create the pass template from settings, with its images and signer.

    A missing image directory is logged, not fatal: wallets will reject
    passes without an icon, but the API itself keeps working.
    """
    template = PassTemplate(
        pass_type_identifier=settings.PASS_TYPE_IDENTIFIER,
        team_identifier=settings.APPLE_DEVELOPER_TEAM_ID,
        organization_name=settings.ORGANIZATION_NAME,
        description=settings.PASS_DESCRIPTION,
        logo_text=settings.LOGO_TEXT,
        sharing_prohibited=settings.SHARING_PROHIBITED,
    )

    images_dir = Path(settings.TEMPLATE_IMAGES_DIR)
    if images_dir.is_dir():
        loaded = template.load_images(images_dir)
        logger.info("Loaded %d template images from %s", loaded, images_dir)
    else:
        logger.warning("Template images directory %s not found", images_dir)

    template.set_signer(PassSigner.from_settings(settings))
    return template


async def create_pass(
    payload: Mapping[str, Any],
    template: PassTemplate,
    store: PassStore,
    http_client: httpx.AsyncClient,
    settings: Settings,
) -> tuple[str, bytes]:
    """
    Issue a new pass for a card record.

    Args:
        payload: Raw JSON body of the request.
        template: Template the pass is created from.
        store: Where the signed archive is registered.
        http_client: Client used to download the thumbnail.
        settings: Support contact and image download limits.

    Returns:
        (serial_number, signed .pkpass archive)

    Raises:
        MissingValueOnRequestError: If the record is incomplete for its type.
        InvalidCardTypeError: If the record type is unknown.
        ImageRequestAbortedError: If the thumbnail download fails.
    """
    record = classify(payload)

    serial_number = str(uuid.uuid4())
    pass_ = template.create_pass(serial_number)

    field_mapper.fill_primary_field(pass_, record)
    field_mapper.fill_secondary_field(pass_, record.message)
    field_mapper.personalize_card(pass_, record)
    pass_.barcodes = barcode_service.generate_barcodes(record)
    field_mapper.fill_back_fields(pass_, record, settings.CONTACT_EMAIL)
    await image_service.embed_image(
        pass_,
        record.image_url,
        http_client,
        max_bytes=settings.IMAGE_MAX_BYTES,
        response_timeout=settings.IMAGE_RESPONSE_TIMEOUT,
        deadline=settings.IMAGE_DEADLINE,
    )

    archive = pass_.as_bytes()
    await store.put(serial_number, archive)

    logger.info(
        "Issued %s pass %s (%d bytes)",
        record.card_type.value, serial_number, len(archive),
    )
    return serial_number, archive


async def get_pass(store: PassStore, serial_number: str) -> bytes:
    """
    Return a previously issued pass archive.

    Raises:
        PassNotFoundError: If no pass was issued under serial_number.
    """
    archive = await store.get(serial_number)
    logger.info("Retrieved pass %s", serial_number)
    return archive
