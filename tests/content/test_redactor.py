import pytest

from quill.journal.config import RedactionConfig, RedactionRuleConfig
from quill.journal.content.redactor import DEFAULT_RULES, Redactor, RedactionRule


@pytest.fixture
def redactor():
    return Redactor()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Call me at 555-123-4567 tomorrow", "Call me at [PHONE] tomorrow"),
        ("Call me at (555) 123-4567", "Call me at [PHONE]"),
        ("Email jane.doe@example.com please", "Email [EMAIL] please"),
        ("SSN 123-45-6789 on file", "SSN [SSN] on file"),
        ("Card 4111 1111 1111 1111 expired", "Card [CREDIT_CARD] expired"),
        ("Server at 192.168.0.12 was down", "Server at [IP_ADDRESS] was down"),
        ("See https://example.com/path?q=1 for more", "See [URL] for more"),
        ("I live at 42 Maple Street now", "I live at [ADDRESS] now"),
        ("Zip is 90210-1234", "Zip is [ZIP]"),
        ("Saw Dr. Smith today", "Saw [NAME] today"),
        ("Hi, my name is Jane Doe", "Hi, my name is [NAME]"),
        ("DOB: 01/02/1980", "[DOB]"),
        ("MRN: A1234567", "[MRN]"),
    ],
)
def test_redacts_categories(redactor, text, expected):
    assert redactor.redact(text) == expected


def test_unmatched_text_unchanged(redactor):
    text = "Felt anxious in the morning but better after lunch."
    assert redactor.redact(text) == text


def test_medical_record_words_without_number_unchanged(redactor):
    text = "The medical record shows progress."
    assert redactor.redact(text) == text


def test_redaction_is_idempotent(redactor):
    text = (
        "Dr. Smith called 555-123-4567 about MRN 12345678; "
        "email jane@example.com or visit www.example.com"
    )
    once = redactor.redact(text)
    assert redactor.redact(once) == once
    assert "555-123-4567" not in once


def test_redaction_is_monotone(redactor):
    extra = redactor.with_rules(
        [*DEFAULT_RULES, RedactionRule.build("codename", r"\bBluebird\b", "[CODENAME]")]
    )
    text = "Bluebird said call 555-123-4567"
    assert redactor.redact(text) == "Bluebird said call [PHONE]"
    assert extra.redact(text) == "[CODENAME] said call [PHONE]"


def test_find_reports_categories(redactor):
    matches = redactor.find("Call 555-123-4567 or mail a@b.io")
    assert {m.category for m in matches} == {"phone", "email"}
    assert redactor.find("nothing here") == []


def test_contains_phi(redactor):
    assert redactor.contains_phi("reach me at 555-123-4567")
    assert not redactor.contains_phi("a quiet day")


def test_with_rules_returns_new_redactor(redactor):
    phone_only = redactor.with_rules(
        [r for r in DEFAULT_RULES if r.category == "phone"]
    )
    assert phone_only is not redactor
    assert phone_only.categories == ["phone"]
    assert "person_name" in redactor.categories
    assert phone_only.redact("Dr. Smith 555-123-4567") == "Dr. Smith [PHONE]"


def test_from_config_filters_and_extends():
    config = RedactionConfig(
        categories=["email"],
        custom_rules=[
            RedactionRuleConfig(
                category="employee_id", pattern=r"emp-\d+", placeholder="[EMPLOYEE]"
            )
        ],
    )
    redactor = Redactor.from_config(config)
    assert redactor.categories == ["email", "employee_id"]
    assert redactor.redact("EMP-991 a@b.io 555-123-4567") == (
        "[EMPLOYEE] [EMAIL] 555-123-4567"
    )
