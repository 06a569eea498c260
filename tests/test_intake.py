"""
Unit tests for request intake: payload decoding, HTML fallback, auth.
"""
import pytest

from errors import AuthError, BodyValidationError
from models import EmailInput
from services.intake import authorize, bearer_token, decode_payload, html_to_text, parse_email


class TestHtmlToText:

    def test_br_variants_become_newlines(self):
        assert html_to_text("a<br>b<BR/>c<br />d") == "a\nb\nc\nd"

    def test_paragraph_close_becomes_newline(self):
        assert html_to_text("<p>One</p><p>Two</p>") == "One\nTwo"

    def test_other_tags_stripped(self):
        assert html_to_text('<div class="x"><b>Lunch</b> at <a href="#">noon</a></div>') == "Lunch at noon"

    def test_nbsp_becomes_space(self):
        assert html_to_text("Room&nbsp;4") == "Room 4"

    def test_result_trimmed(self):
        assert html_to_text("  <p> hello </p>  ") == "hello"

    def test_other_entities_left_alone(self):
        assert html_to_text("R&amp;D") == "R&amp;D"


class TestDecodePayload:

    def test_string_is_parsed(self):
        assert decode_payload('{"body": "hi"}') == {"body": "hi"}

    def test_bytes_are_parsed(self):
        assert decode_payload(b'{"body": "hi"}') == {"body": "hi"}

    def test_parsed_object_passes_through(self):
        data = {"body": "hi"}
        assert decode_payload(data) is data

    def test_malformed_string_raises(self):
        with pytest.raises(BodyValidationError) as exc_info:
            decode_payload("{not json")
        assert exc_info.value.error == "Malformed JSON body"

    def test_invalid_utf8_raises(self):
        with pytest.raises(BodyValidationError):
            decode_payload(b"\xff\xfe{")


class TestParseEmail:

    def test_plain_body(self):
        email = parse_email({"subject": "Sync", "body": "See you at 3"})
        assert isinstance(email, EmailInput)
        assert email.subject == "Sync"
        assert email.body == "See you at 3"

    def test_subject_defaults_to_empty(self):
        assert parse_email({"body": "hello"}).subject == ""

    def test_html_fallback_when_body_empty(self):
        email = parse_email({"body": "", "html": "<p>Hi&nbsp;there</p><br>Bye"})
        assert email.body == "Hi there\n\nBye"

    def test_body_wins_over_html(self):
        email = parse_email({"body": "plain", "html": "<p>markup</p>"})
        assert email.body == "plain"

    def test_non_object_rejected(self):
        for payload in ("[1, 2]", "42", "null", None):
            with pytest.raises(BodyValidationError) as exc_info:
                parse_email(payload)
            assert exc_info.value.error == "Missing JSON body"

    def test_missing_body_rejected(self):
        with pytest.raises(BodyValidationError) as exc_info:
            parse_email({"subject": "Sync"})
        assert exc_info.value.error == "Missing 'body' in JSON payload"

    def test_whitespace_body_rejected(self):
        with pytest.raises(BodyValidationError):
            parse_email({"body": "   \n "})

    def test_html_with_only_tags_rejected(self):
        with pytest.raises(BodyValidationError):
            parse_email({"html": "<p>&nbsp;</p><br>"})

    def test_null_fields_coerced(self):
        email = parse_email({"subject": None, "body": "x", "html": None})
        assert email.subject == ""
        assert email.html == ""


class TestAuthorize:

    def test_valid_token(self):
        authorize("Bearer s3cret", "s3cret")

    def test_wrong_token(self):
        with pytest.raises(AuthError):
            authorize("Bearer nope", "s3cret")

    def test_missing_header(self):
        with pytest.raises(AuthError):
            authorize(None, "s3cret")

    def test_not_bearer_scheme(self):
        with pytest.raises(AuthError):
            authorize("Basic s3cret", "s3cret")

    def test_no_configured_token_fails_closed(self):
        with pytest.raises(AuthError):
            authorize("Bearer anything", None)
        with pytest.raises(AuthError):
            authorize("Bearer ", "")

    def test_bearer_token_extraction(self):
        assert bearer_token("Bearer abc") == "abc"
        assert bearer_token("Bearer ") == ""
        assert bearer_token("abc") == ""
