"""Unit tests for exchange results and error-body parsing."""

import pytest

from mexc_dashboard.api.results import (
    ErrorKind,
    ExchangeResult,
    ParsedErrorBody,
    RawErrorBody,
    parse_error_body,
)


class TestParseErrorBody:

    def test_code_and_msg(self):
        body = parse_error_body('{"code": -2015, "msg": "Invalid API-key"}')
        assert body == ParsedErrorBody(code='-2015', message='Invalid API-key')

    def test_message_field(self):
        body = parse_error_body('{"code": "10001", "message": "bad param"}')
        assert body == ParsedErrorBody(code='10001', message='bad param')

    def test_code_only(self):
        assert parse_error_body('{"code": 1}') == ParsedErrorBody(code='1', message=None)

    def test_msg_only(self):
        assert parse_error_body('{"msg": "oops"}') == ParsedErrorBody(code=None, message='oops')

    @pytest.mark.parametrize("text", [
        'Service Unavailable',
        '[1, 2, 3]',
        '{"error": "something"}',
        '"just a string"',
    ])
    def test_unrecognized_bodies_fall_back_to_raw(self, text):
        assert parse_error_body(text) == RawErrorBody(text=text)

    def test_empty_body(self):
        assert parse_error_body('') == RawErrorBody(text='')

    def test_boolean_code_ignored(self):
        assert parse_error_body('{"code": true, "msg": "x"}') == ParsedErrorBody(code=None, message='x')


class TestExchangeResult:

    def test_ok(self):
        result = ExchangeResult.ok({'a': 1}, status_code=200)
        assert result.success
        assert result.error is None
        assert result.kind is None
        assert result.to_dict() == {'success': True, 'data': {'a': 1}}

    def test_fail_defaults_to_exchange_kind(self):
        result = ExchangeResult.fail("boom")
        assert not result.success
        assert result.kind == ErrorKind.EXCHANGE
        assert result.to_dict() == {'success': False, 'error': 'boom'}

    def test_fail_with_code(self):
        result = ExchangeResult.fail("bad key", code="-2015", kind=ErrorKind.AUTHENTICATION)
        assert result.to_dict() == {'success': False, 'error': 'bad key', 'code': '-2015'}
        assert "permissions" in result.hint

    def test_unknown_code_has_no_hint(self):
        assert ExchangeResult.fail("x", code="99999").hint is None

    @pytest.mark.parametrize("kind,retryable", [
        (ErrorKind.TIMEOUT, True),
        (ErrorKind.NETWORK, True),
        (ErrorKind.AUTHENTICATION, False),
        (ErrorKind.EXCHANGE, False),
        (ErrorKind.RATE_LIMITED, False),
        (ErrorKind.ENCRYPTION, False),
    ])
    def test_retryable_kinds(self, kind, retryable):
        assert ExchangeResult.fail("x", kind=kind).retryable is retryable

    def test_success_never_retryable(self):
        assert not ExchangeResult.ok().retryable
