"""
Shared fixtures: a small RSA PKI (root -> intermediate -> client leaf) and
PKCS#12 archives built from it
"""

import base64
import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

ARCHIVE_PASSWORD = "Archive#Pass123"


def _name(common_name):
    return x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "CWS Test"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])


def make_certificate(common_name, public_key, signing_key, issuer=None, is_ca=False):
    """Issue a certificate for public_key, self-signed when issuer is None"""
    now = datetime.datetime.now(datetime.timezone.utc)
    subject = _name(common_name)
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer.subject if issuer is not None else subject)
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
    )
    return builder.sign(signing_key, hashes.SHA256())


def build_archive(key, cert, cas, password, name=b"client"):
    """PKCS#12 bytes protected with password"""
    return pkcs12.serialize_key_and_certificates(
        name=name,
        key=key,
        cert=cert,
        cas=cas,
        encryption_algorithm=serialization.BestAvailableEncryption(password.encode("utf-8"))
    )


@pytest.fixture(scope="session")
def pki():
    """Root CA, intermediate CA and client leaf with their RSA keys"""
    root_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    root = make_certificate("Test Root CA", root_key.public_key(), root_key, is_ca=True)

    inter_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    inter = make_certificate("Test Issuing CA", inter_key.public_key(), root_key,
                             issuer=root, is_ca=True)

    leaf_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    leaf = make_certificate("client.example.com", leaf_key.public_key(), inter_key, issuer=inter)

    return {
        'root_key': root_key,
        'root': root,
        'inter_key': inter_key,
        'inter': inter,
        'leaf_key': leaf_key,
        'leaf': leaf,
    }


@pytest.fixture(scope="session")
def ec_identity():
    """Self-signed EC key and certificate"""
    key = ec.generate_private_key(ec.SECP256R1())
    cert = make_certificate("ec.example.com", key.public_key(), key)
    return key, cert


@pytest.fixture(scope="session")
def archive_factory(pki):
    """Builds the PKCS#12 archive the service would return for a password"""
    def factory(password, name=b"client"):
        return build_archive(pki['leaf_key'], pki['leaf'], [pki['inter'], pki['root']],
                             password, name=name)
    return factory


@pytest.fixture(scope="session")
def archive_bytes(archive_factory):
    return archive_factory(ARCHIVE_PASSWORD)


@pytest.fixture(scope="session")
def archive_b64(archive_bytes):
    """Base64 archive text as found in a download response"""
    return base64.b64encode(archive_bytes).decode("ascii")


@pytest.fixture
def keystore_file(tmp_path, archive_bytes):
    path = tmp_path / "client.p12"
    path.write_bytes(archive_bytes)
    return path
