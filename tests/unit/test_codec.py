"""Unit tests for the bearer token codec."""

import pytest
from jose import jwt
from jose.utils import base64url_decode, base64url_encode
from pydantic import SecretStr

from nft_oauth.core.errors import BadSignature, MalformedToken, TokenExpired
from nft_oauth.models import TokenGrant
from nft_oauth.oauth import BearerTokenCodec
from tests.fixtures.doubles import CLIENT_ID, SUBJECT, TEST_SECRET, FakeClock


def make_grant(token_id: int = 7) -> TokenGrant:
    return TokenGrant(
        token_id=token_id,
        subject_address=SUBJECT,
        client_id=CLIENT_ID,
        scope="read write",
    )


def flip_char(segment: str, index: int) -> str:
    replacement = "A" if segment[index] != "A" else "B"
    return segment[:index] + replacement + segment[index + 1 :]


class TestIssue:
    """Test bearer token issuance."""

    def test_claims_carry_lifetime(self, codec: BearerTokenCodec, clock: FakeClock) -> None:
        """Test iat/exp are derived from the clock and TTL."""
        issued = codec.issue(make_grant(), 3600)

        assert issued.claims.issued_at == int(clock())
        assert issued.claims.expires_at == int(clock()) + 3600

    def test_payload_uses_wire_claim_names(self, codec: BearerTokenCodec) -> None:
        """Test the token payload uses the camelCase claim names."""
        issued = codec.issue(make_grant(), 60)

        payload = jwt.get_unverified_claims(issued.token)
        assert payload["tokenId"] == "7"
        assert payload["userAddress"] == SUBJECT
        assert payload["clientId"] == CLIENT_ID
        assert payload["scope"] == "read write"
        assert set(payload) == {"tokenId", "userAddress", "clientId", "scope", "iat", "exp"}

    def test_repr_hides_secret(self, codec: BearerTokenCodec) -> None:
        """Test the signing secret never appears in the repr."""
        assert TEST_SECRET not in repr(codec)


class TestDecode:
    """Test bearer token decoding."""

    def test_round_trip(self, codec: BearerTokenCodec) -> None:
        """Test decoding an issued token yields the issued claims."""
        issued = codec.issue(make_grant(), 60)

        claims = codec.decode(issued.token)

        assert claims == issued.claims
        assert claims.token_id == 7

    def test_valid_at_expiry_instant(self, codec: BearerTokenCodec, clock: FakeClock) -> None:
        """Test a token is still accepted at exactly its expiry second."""
        issued = codec.issue(make_grant(), 60)
        clock.now = float(issued.claims.expires_at)

        assert codec.decode(issued.token) == issued.claims

    def test_expired_token(self, codec: BearerTokenCodec, clock: FakeClock) -> None:
        """Test a token past its own expiry is rejected."""
        issued = codec.issue(make_grant(), 60)
        clock.advance(61)

        with pytest.raises(TokenExpired) as exc_info:
            codec.decode(issued.token)

        assert exc_info.value.reason == "token_expired"

    @pytest.mark.parametrize(
        ("segment", "old", "new"),
        [
            (0, b"JWT", b"JWS"),
            (1, b"read", b"reaD"),
            (2, None, None),
        ],
        ids=["header", "payload", "signature"],
    )
    def test_one_byte_tamper(
        self,
        codec: BearerTokenCodec,
        segment: int,
        old: bytes | None,
        new: bytes | None,
    ) -> None:
        """Test changing one decoded byte of any segment breaks the signature."""
        parts = codec.issue(make_grant(), 60).token.split(".")
        raw = bytearray(base64url_decode(parts[segment].encode()))
        if old is None:
            raw[len(raw) // 2] ^= 0x01
        else:
            start = raw.index(old)
            raw[start : start + len(old)] = new or b""
        parts[segment] = base64url_encode(bytes(raw)).decode()

        with pytest.raises(BadSignature):
            codec.decode(".".join(parts))

    def test_flipped_payload_character(self, codec: BearerTokenCodec) -> None:
        """Test changing one character of the encoded payload is detected."""
        header, payload, signature = codec.issue(make_grant(), 60).token.split(".")
        tampered = ".".join([header, flip_char(payload, len(payload) // 2), signature])

        with pytest.raises(BadSignature):
            codec.decode(tampered)

    @pytest.mark.parametrize(
        "header",
        [b"\xff\xfe\xfd", b"not json", b'["alg", "HS256"]'],
        ids=["not-utf8", "not-json", "not-an-object"],
    )
    def test_undecodable_header(self, codec: BearerTokenCodec, header: bytes) -> None:
        """Test a three-segment token whose header does not decode is malformed."""
        _, payload, signature = codec.issue(make_grant(), 60).token.split(".")
        token = ".".join([base64url_encode(header).decode(), payload, signature])

        with pytest.raises(MalformedToken):
            codec.decode(token)

    def test_three_segments_of_garbage(self, codec: BearerTokenCodec) -> None:
        """Test a token with the right shape but no content is malformed."""
        with pytest.raises(MalformedToken):
            codec.decode("abc.def.ghi")

    def test_foreign_secret(self, codec: BearerTokenCodec, clock: FakeClock) -> None:
        """Test a token signed under another secret is rejected."""
        other = BearerTokenCodec(SecretStr("another-secret-that-is-also-32-characters"), clock=clock)
        token = other.issue(make_grant(), 60).token

        with pytest.raises(BadSignature):
            codec.decode(token)

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "not a.jwt at.all"])
    def test_malformed_token(self, codec: BearerTokenCodec, token: str) -> None:
        """Test strings that are not compact JWS are rejected."""
        with pytest.raises(MalformedToken) as exc_info:
            codec.decode(token)

        assert exc_info.value.reason == "malformed_token"

    def test_signed_but_unusable_claims(self, codec: BearerTokenCodec) -> None:
        """Test a correctly signed token without the expected claims is malformed."""
        token = jwt.encode({"sub": "someone"}, TEST_SECRET, algorithm="HS256")

        with pytest.raises(MalformedToken):
            codec.decode(token)
