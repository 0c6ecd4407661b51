"""Unit tests for request signing."""

import hashlib
import hmac

import pytest

from mexc_dashboard.api.signer import Signer, build_query_string, canonical_params, sign


SECRET = "testsecret0123456789abcd"


class TestCanonicalParams:

    def test_keys_are_sorted(self):
        params = canonical_params({'symbol': 'SOLUSDT', 'limit': 20, 'interval': '1m'})
        assert list(params) == ['interval', 'limit', 'symbol']

    def test_none_values_are_dropped(self):
        assert canonical_params({'symbol': 'SOLUSDT', 'price': None}) == {'symbol': 'SOLUSDT'}

    def test_values_are_stringified(self):
        params = canonical_params({'limit': 20, 'flag': True, 'other': False, 'qty': 0.5})
        assert params == {'flag': 'true', 'limit': '20', 'other': 'false', 'qty': '0.5'}

    def test_query_string_is_form_encoded(self):
        assert build_query_string({'b': 'x y', 'a': '1'}) == 'a=1&b=x+y'

    def test_empty_params(self):
        assert build_query_string({}) == ''


class TestSign:

    def test_matches_hmac_sha256(self):
        query = "symbol=SOLUSDT&timestamp=1700000000000"
        expected = hmac.new(SECRET.encode(), query.encode(), hashlib.sha256).hexdigest()
        assert sign(query, SECRET) == expected

    def test_signature_is_lowercase_hex(self):
        signature = sign("timestamp=1", SECRET)
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)


class TestSigner:

    def test_adds_timestamp_and_signs_canonical_query(self):
        signer = Signer(SECRET)
        signed = signer.sign_params("/api/v3/order", "post", {'symbol': 'SOLUSDT', 'side': 'BUY'},
                                    timestamp=1700000000000)

        assert signed.method == "POST"
        assert signed.timestamp == 1700000000000
        assert signed.params == {'side': 'BUY', 'symbol': 'SOLUSDT', 'timestamp': '1700000000000'}
        assert signed.query_string == "side=BUY&symbol=SOLUSDT&timestamp=1700000000000"
        assert signed.signature == sign(signed.query_string, SECRET)

    def test_signature_is_appended_last(self):
        signed = Signer(SECRET).sign_params("/api/v3/account", "GET", timestamp=1)
        assert signed.signed_query_string == f"timestamp=1&signature={signed.signature}"

    def test_uses_clock_when_no_timestamp(self, fake_clock):
        signed = Signer(SECRET, clock=fake_clock).sign_params("/api/v3/account", "GET")
        assert signed.timestamp == fake_clock.now_ms

    def test_same_inputs_same_signature(self):
        signer = Signer(SECRET)
        first = signer.sign_params("/api/v3/order", "POST", {'a': 1, 'b': 2}, timestamp=5)
        second = signer.sign_params("/api/v3/order", "POST", {'b': 2, 'a': 1}, timestamp=5)
        assert first.signature == second.signature

    def test_different_secret_different_signature(self):
        params = {'symbol': 'SOLUSDT'}
        first = Signer(SECRET).sign_params("/api/v3/order", "POST", params, timestamp=5)
        second = Signer(SECRET + "x").sign_params("/api/v3/order", "POST", params, timestamp=5)
        assert first.signature != second.signature

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            Signer("")

    def test_repr_hides_secret(self):
        assert SECRET not in repr(Signer(SECRET))
