"""Tests for free-text parameter detection and bare-input classification."""

import pytest

from fundbot.nlu.entity_resolver import EntityResolver, classify_bare_input, detect_parameters


class TestClassifyBareInput:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("ABGPA5303H", {"PAN": "ABGPA5303H"}),
            ("9876543210", {"mobile": "9876543210"}),
            ("CL12345", {"clientId": "CL12345"}),
            ("John Smith", {"name": "John Smith"}),
        ],
    )
    def test_shapes(self, value, expected):
        assert classify_bare_input(value) == expected

    def test_strips_quotes(self):
        assert classify_bare_input("'ABGPA5303H'") == {"PAN": "ABGPA5303H"}


class TestExtractEntities:
    def test_pan(self):
        assert detect_parameters("Find user with PAN ABGPA5303H") == {"PAN": "ABGPA5303H"}

    def test_mobile(self):
        assert detect_parameters("who owns 9876543210")["mobile"] == "9876543210"

    def test_limit_type_and_client(self):
        found = detect_parameters("Get last 5 purchase transactions for client 11181")
        assert found == {"limit": 5, "transactionType": "purchase", "clientId": "11181"}

    def test_explicit_client_id_phrase(self):
        assert detect_parameters("details for client id CL12345")["clientId"] == "CL12345"

    def test_client_words_without_digits_are_not_ids(self):
        assert "clientId" not in detect_parameters("show client details please")

    def test_date_is_not_a_client_id(self):
        assert "clientId" not in detect_parameters("transactions since 2024-01-15")

    def test_pan_not_reused_as_client_id(self):
        found = detect_parameters("ABGPA5303H")
        assert found == {"PAN": "ABGPA5303H"}

    def test_lowercase_pan_is_normalized(self):
        assert detect_parameters("PAN abgpa5303h") == {"PAN": "ABGPA5303H"}

    def test_hyphenated_code_is_not_a_client_id(self):
        assert "clientId" not in detect_parameters("aum for ARN-1001")

    def test_general_question_yields_nothing(self):
        assert EntityResolver().extract_entities("What is SIP?") == {}

    def test_none_is_safe(self):
        assert EntityResolver().extract_entities(None) == {}
