# cws_client/certificates/formats/__init__.py

from .der import encode_pkcs1, encrypt_private_key
from .pem import PemLabel, decode_pem, encode_pem, write_certificate, write_certificates
from .pkcs12 import materialize

__all__ = [
    'encode_pkcs1',
    'encrypt_private_key',
    'PemLabel',
    'decode_pem',
    'encode_pem',
    'write_certificate',
    'write_certificates',
    'materialize'
]
