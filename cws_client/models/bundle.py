# cws_client/models/bundle.py

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CertBundle(BaseModel):
    """PEM encoded private key, client cert and CA cert chain"""

    model_config = ConfigDict(frozen=True)

    # "RSA PRIVATE KEY" (PKCS#1) or "ENCRYPTED PRIVATE KEY" (PKCS#8)
    key: str
    # Password of an encrypted key, None if the key is not encrypted
    key_password: Optional[str] = Field(default=None, repr=False)
    cert: str
    # CA chain as concatenated PEM blocks, may be empty
    cacerts: str = ""

    @property
    def encrypted(self) -> bool:
        return self.key_password is not None
