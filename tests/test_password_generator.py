"""
Tests for one-time password generation
"""

import pytest

from cws_client.exceptions import PasswordGenerationError
from cws_client.models.requests import check_password
from cws_client.services.password_generator import PasswordGenerator, password_generator


class TestPasswordGenerator:
    """Test suite for PasswordGenerator service"""

    @pytest.fixture
    def generator(self):
        return PasswordGenerator()

    def test_password_generation_default_length(self, generator):
        """Test password generation with default length"""
        password = generator.generate()

        assert len(password) == generator.DEFAULT_PASSWORD_LENGTH == 20
        assert any(c.islower() for c in password)  # Has lowercase
        assert any(c.isupper() for c in password)  # Has uppercase
        assert any(c.isdigit() for c in password)  # Has digit
        assert any(c in generator.SPECIAL_CHARS for c in password)  # Has special

    @pytest.mark.parametrize("length", [15, 25, 100])
    def test_password_generation_custom_length(self, generator, length):
        assert len(generator.generate(length)) == length

    @pytest.mark.parametrize("length", [10, 14, 101])
    def test_password_generation_length_error(self, generator, length):
        """Test password generation fails outside the allowed length range"""
        with pytest.raises(PasswordGenerationError):
            generator.generate(length)

    def test_password_uniqueness(self, generator):
        """Test that generated passwords are unique"""
        passwords = [generator.generate() for _ in range(10)]
        assert len(set(passwords)) == 10

    def test_passwords_accepted_for_download(self):
        """Test generated passwords pass the download password check"""
        for _ in range(50):
            password = password_generator.generate()
            assert check_password(password) == password
