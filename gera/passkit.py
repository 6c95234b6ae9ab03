"""
Wallet pass template and pass, built on the wallet-py3k pass models.

A PassTemplate carries everything shared by the passes this service issues:
identifiers, organization metadata, template images (icon, logo) and the
signer. Each pass created from it is a wallet.models.Pass with the "generic"
field layout; services fill its fields, colors, barcodes and extra images
through the library's own API (passInformation field lists, addFile).

wallet-py3k writes pass.json, manifest.json and the zip itself. Its signing
step shells out to openssl with certificate files on disk; GeraPass replaces
only that step with the in-process PassSigner from gera.security, since the
credentials arrive as base64 environment values.
"""

import io
import logging
from pathlib import Path

from wallet.models import Barcode, Generic, Pass

from gera.security import PassSigner

logger = logging.getLogger(__name__)

PASS_MIME_TYPE = "application/vnd.apple.pkpass"

# Pass archives predate UTF-8 barcodes; readers decode messages as Latin-1.
BARCODE_MESSAGE_ENCODING = "iso-8859-1"


class GeraPass(Pass):
    """
    A wallet pass carrying a list of barcodes and signed in-process.

    The signer is None for templates built without credentials; such a
    pass can be filled but not rendered.
    """

    def __init__(self, passInformation, signer: PassSigner | None = None, **kwargs):
        super().__init__(passInformation, **kwargs)
        self.signer = signer
        self.barcodes: list[Barcode] = []
        self.sharingProhibited = False

    def json_dict(self):
        data = super().json_dict()
        if self.barcodes:
            data["barcodes"] = [barcode.json_dict() for barcode in self.barcodes]
        data["sharingProhibited"] = self.sharingProhibited
        return data

    def _createSignature(self, manifest, *args, **kwargs):
        if isinstance(manifest, str):
            manifest = manifest.encode("utf-8")
        return self.signer.sign(manifest)

    def as_bytes(self) -> bytes:
        """
        Render the signed .pkpass archive.

        Raises:
            RuntimeError: If the pass has no signer.
        """
        if self.signer is None:
            raise RuntimeError("Pass template has no signing credentials")
        # Certificate paths and password are unused by _createSignature
        buffer = self.create(None, None, None, None, io.BytesIO())
        return buffer.getvalue()


class PassTemplate:
    """Shared definition every issued pass starts from."""

    def __init__(
        self,
        *,
        pass_type_identifier: str,
        team_identifier: str,
        organization_name: str,
        description: str,
        logo_text: str | None = None,
        sharing_prohibited: bool = False,
    ):
        self.pass_type_identifier = pass_type_identifier
        self.team_identifier = team_identifier
        self.organization_name = organization_name
        self.description = description
        self.logo_text = logo_text
        self.sharing_prohibited = sharing_prohibited
        # Archive member name -> PNG bytes
        self.images: dict[str, bytes] = {}
        self.signer: PassSigner | None = None

    def set_signer(self, signer: PassSigner) -> None:
        self.signer = signer

    def load_images(self, directory: str | Path) -> int:
        """
        Load every "<name>[@2x|@3x].png" file of a directory.

        Returns:
            The number of image files loaded.
        """
        loaded = 0
        for path in sorted(Path(directory).glob("*.png")):
            name, _, density = path.stem.partition("@")
            if not name.isalpha() or density not in ("", "2x", "3x"):
                logger.warning("Skipping template image with unexpected name: %s", path.name)
                continue
            self.images[path.name] = path.read_bytes()
            loaded += 1
        return loaded

    def create_pass(self, serial_number: str) -> GeraPass:
        pass_ = GeraPass(
            Generic(),
            signer=self.signer,
            passTypeIdentifier=self.pass_type_identifier,
            organizationName=self.organization_name,
            teamIdentifier=self.team_identifier,
        )
        pass_.serialNumber = serial_number
        pass_.description = self.description
        pass_.logoText = self.logo_text
        pass_.sharingProhibited = self.sharing_prohibited
        for name, data in self.images.items():
            pass_.addFile(name, io.BytesIO(data))
        return pass_
