"""
Tests for keystore and alias key managers
"""

import pytest

from cws_client.certificates.keystore import Keystore
from cws_client.tls.key_manager import AliasKeyManager, KeystoreKeyManager


@pytest.fixture
def two_key_keystore(pki, ec_identity):
    """Keystore with RSA key entries A and B, EC entry C and a trusted root"""
    keystore = Keystore()
    keystore.set_key_entry("A", pki['leaf_key'], [pki['leaf'], pki['inter'], pki['root']])
    keystore.set_key_entry("B", pki['inter_key'], [pki['inter'], pki['root']])
    keystore.set_key_entry("C", ec_identity[0], [ec_identity[1]])
    keystore.set_certificate_entry("root", pki['root'])
    return keystore


class TestKeystoreKeyManager:
    """Test suite for the keystore backed key manager"""

    def test_client_aliases_by_key_type(self, two_key_keystore):
        key_manager = KeystoreKeyManager(two_key_keystore)

        assert key_manager.get_client_aliases("RSA") == ["A", "B"]
        assert key_manager.get_client_aliases("EC") == ["C"]
        assert key_manager.get_client_aliases("DSA") is None

    def test_choose_client_alias_first_match(self, two_key_keystore):
        key_manager = KeystoreKeyManager(two_key_keystore)

        assert key_manager.choose_client_alias(["RSA", "EC"]) == "A"
        assert key_manager.choose_client_alias(["EC", "RSA"]) == "C"
        assert key_manager.choose_client_alias(["DSA"]) is None

    def test_issuer_filter(self, two_key_keystore, pki):
        """Test aliases are limited to chains issued by an accepted CA"""
        key_manager = KeystoreKeyManager(two_key_keystore)

        assert key_manager.get_client_aliases("RSA", [pki['inter'].subject]) == ["A"]
        assert key_manager.get_client_aliases("RSA", [pki['root'].subject]) == ["A", "B"]

    def test_key_and_chain_lookup(self, two_key_keystore, pki):
        key_manager = KeystoreKeyManager(two_key_keystore)

        assert key_manager.get_private_key("B") is pki['inter_key']
        assert key_manager.get_certificate_chain("B") == [pki['inter'], pki['root']]
        assert key_manager.get_private_key("root") is None


class TestAliasKeyManager:
    """Test suite for the fixed alias key manager"""

    @pytest.fixture
    def key_manager(self, two_key_keystore):
        return AliasKeyManager(KeystoreKeyManager(two_key_keystore), "B")

    def test_client_aliases_only_configured(self, key_manager):
        assert key_manager.get_client_aliases("RSA") == ["B"]
        assert key_manager.get_client_aliases("EC") == ["B"]

    def test_always_chooses_configured_alias(self, key_manager, pki):
        """Test B is presented even though A enumerates first"""
        assert key_manager.choose_client_alias(["RSA", "EC"]) == "B"
        assert key_manager.choose_client_alias(["RSA"], [pki['inter'].subject]) == "B"

    def test_lookups_resolve_to_configured_alias(self, key_manager, pki):
        assert key_manager.get_private_key("A") is pki['inter_key']
        assert key_manager.get_certificate_chain("A")[0] == pki['inter']

    def test_server_queries_delegated(self, key_manager):
        assert key_manager.get_server_aliases("RSA") == ["A", "B"]
        assert key_manager.choose_server_alias("EC") == "C"
