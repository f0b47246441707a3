"""
Token Codec Tests
-----------------
Test token signing, signature verification and tamper detection.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519

from token_auth.auth import token_codec
from token_auth.auth.errors import MalformedToken, SignatureInvalid
from token_auth.models.auth_models import TokenPayload


class TestTokenCodec:
    """Test sign/verify against an Ed25519 keypair."""

    @pytest.fixture(autouse=True)
    def _setup(self, keypair):
        self.keys = keypair
        issued_at = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
        self.payload = TokenPayload(
            issuer="test_issuer",
            subject="u1",
            audience="test_audience",
            issued_at=issued_at,
            expiration=issued_at + timedelta(minutes=15),
            token_id="0123456789abcdef0123456789abcdef",
            user_id="u1",
            email="a@example.com",
            roles=["user"],
        )
        self.token = token_codec.sign(
            self.payload, self.keys.private_key, self.keys.key_id
        )

    def test_sign_produces_compact_token(self):
        """Token has header, payload and signature segments."""
        assert isinstance(self.token, str)
        assert len(self.token.split(".")) == 3

    def test_sign_sets_header(self):
        """Header names the algorithm, type and key ID."""
        header = jwt.get_unverified_header(self.token)

        assert header["alg"] == "EdDSA"
        assert header["typ"] == "JWT"
        assert header["kid"] == self.keys.key_id

    def test_verify_returns_claim_set(self):
        """Verification yields the signed claims."""
        payload = token_codec.verify(self.token, self.keys.public_key)

        assert payload == self.payload
        assert payload.not_before is None

    def test_verify_foreign_key(self):
        """Token signed by another key is rejected."""
        foreign = ed25519.Ed25519PrivateKey.generate()
        forged = token_codec.sign(self.payload, foreign)

        with pytest.raises(SignatureInvalid):
            token_codec.verify(forged, self.keys.public_key)

    @pytest.mark.parametrize(
        "token",
        ["", "not-a-token", "a.b", "a.b.c.d", "header.payload.!!!"],
    )
    def test_verify_malformed(self, token):
        """Structurally broken tokens are signature failures."""
        with pytest.raises(SignatureInvalid):
            token_codec.verify(token, self.keys.public_key)

    def test_verify_truncated(self):
        """Dropping the tail of the token breaks the signature."""
        with pytest.raises(SignatureInvalid):
            token_codec.verify(self.token[:-10], self.keys.public_key)

    def test_verify_detects_any_single_character_change(self):
        """Changing any one character of the token fails verification."""
        for index, char in enumerate(self.token):
            replacement = "A" if char != "A" else "B"
            tampered = self.token[:index] + replacement + self.token[index + 1 :]

            with pytest.raises(SignatureInvalid):
                token_codec.verify(tampered, self.keys.public_key)

    def test_verify_rejects_none_algorithm(self):
        """Unsigned tokens are never accepted."""
        unsigned = jwt.encode(self.payload.to_claims(), None, algorithm="none")

        with pytest.raises(SignatureInvalid):
            token_codec.verify(unsigned, self.keys.public_key)

    def test_verify_signed_but_incomplete_claims(self):
        """Valid signature over claims without timestamps is malformed."""
        token = jwt.encode(
            {"user_id": "u1", "email": "a@example.com"},
            self.keys.private_key,
            algorithm="EdDSA",
        )

        with pytest.raises(MalformedToken):
            token_codec.verify(token, self.keys.public_key)

    def test_not_before_round_trip(self):
        """Not-before survives signing at second precision."""
        not_before = self.payload.issued_at + timedelta(minutes=5)
        payload = self.payload.model_copy(update={"not_before": not_before})

        token = token_codec.sign(payload, self.keys.private_key)
        decoded = token_codec.verify(token, self.keys.public_key)

        assert decoded.not_before == not_before
