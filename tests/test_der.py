"""
Tests for private key re-encoding
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from cws_client.certificates.formats.der import encode_pkcs1, encode_pkcs8, encrypt_private_key
from cws_client.exceptions import BundleError


class TestEncodePkcs1:
    """Test suite for PKCS#8 -> PKCS#1 conversion"""

    def test_same_key_material(self, pki):
        """Test the PKCS#1 structure holds the same RSA key"""
        key = pki['leaf_key']
        pkcs1 = encode_pkcs1(encode_pkcs8(key))

        loaded = serialization.load_der_private_key(pkcs1, password=None)
        assert isinstance(loaded, rsa.RSAPrivateKey)
        assert loaded.private_numbers() == key.private_numbers()

    def test_matches_traditional_openssl_encoding(self, pki):
        key = pki['leaf_key']
        expected = key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption()
        )
        assert encode_pkcs1(encode_pkcs8(key)) == expected

    def test_pkcs1_input_unchanged(self, pki):
        """Test PKCS#1 input comes back as is"""
        pkcs1 = encode_pkcs1(encode_pkcs8(pki['leaf_key']))
        assert encode_pkcs1(pkcs1) == pkcs1

    def test_pkcs1_shorter_than_pkcs8(self, pki):
        pkcs8 = encode_pkcs8(pki['leaf_key'])
        assert len(encode_pkcs1(pkcs8)) < len(pkcs8)

    def test_non_rsa_key_error(self, ec_identity):
        """Test EC keys can't be written as PKCS#1"""
        key, _ = ec_identity
        with pytest.raises(BundleError):
            encode_pkcs1(encode_pkcs8(key))

    def test_garbage_error(self):
        with pytest.raises(BundleError):
            encode_pkcs1(b"\x30\x03\x02\x01\x00")


class TestEncryptPrivateKey:
    """Test suite for encrypted PKCS#8 output"""

    def test_decrypts_with_password(self, pki):
        encrypted = encrypt_private_key(pki['leaf_key'], "s3cret")

        loaded = serialization.load_der_private_key(encrypted, password=b"s3cret")
        assert loaded.private_numbers() == pki['leaf_key'].private_numbers()

    def test_der_input(self, pki):
        """Test unencrypted DER input is accepted"""
        encrypted = encrypt_private_key(encode_pkcs8(pki['leaf_key']), "s3cret")
        assert serialization.load_der_private_key(encrypted, password=b"s3cret") is not None

    def test_wrong_password_fails(self, pki):
        encrypted = encrypt_private_key(pki['leaf_key'], "s3cret")
        with pytest.raises(ValueError):
            serialization.load_der_private_key(encrypted, password=b"other")

    def test_not_readable_without_password(self, pki):
        encrypted = encrypt_private_key(pki['leaf_key'], "s3cret")
        with pytest.raises(TypeError):
            serialization.load_der_private_key(encrypted, password=None)

    def test_empty_password_error(self, pki):
        with pytest.raises(BundleError):
            encrypt_private_key(pki['leaf_key'], "")
