import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from quill.journal.config.models import RedactionConfig, RedactionRuleConfig

_HONORIFIC = r"(?:Mr|Mrs|Ms|Miss|Mx|Dr|Prof|Nurse|Patient)\.?"
_CAPITALIZED = r"[A-Z][a-z'\-]+"
_STREET_SUFFIX = (
    r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr|"
    r"Court|Ct|Way|Place|Pl|Terrace|Circle|Parkway|Pkwy)"
)


@dataclass(frozen=True)
class RedactionRule:
    """A compiled detection rule for one PHI/PII category."""

    category: str
    pattern: re.Pattern[str]
    placeholder: str

    @classmethod
    def build(
        cls, category: str, pattern: str, placeholder: str, ignore_case: bool = False
    ) -> "RedactionRule":
        flags = re.IGNORECASE if ignore_case else 0
        return cls(category, re.compile(pattern, flags), placeholder)

    @classmethod
    def from_config(cls, rule: RedactionRuleConfig) -> "RedactionRule":
        return cls.build(rule.category, rule.pattern, rule.placeholder, rule.ignore_case)


@dataclass(frozen=True)
class RedactionMatch:
    category: str
    start: int
    end: int


# Order matters: more specific formats are matched before the generic ones
# they would otherwise be mistaken for (SSN and card numbers before phones,
# emails before URLs, dates of birth before anything numeric).
DEFAULT_RULES: tuple[RedactionRule, ...] = (
    RedactionRule.build(
        "email",
        r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b",
        "[EMAIL]",
    ),
    RedactionRule.build(
        "dob",
        r"\b(?:DOB|D\.O\.B\.|date\s+of\s+birth|born\s+(?:on\s+)?)\s*[:\-]?\s*"
        r"(?:\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}|"
        r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}|"
        r"\d{4}-\d{2}-\d{2})",
        "[DOB]",
        ignore_case=True,
    ),
    RedactionRule.build(
        "mrn",
        r"\b(?:MRN|medical\s+record(?:\s+(?:number|no\.?|#))?)\s*[:#]?\s*"
        r"(?=[A-Z0-9\-]*\d)[A-Z0-9\-]{4,}\b",
        "[MRN]",
        ignore_case=True,
    ),
    RedactionRule.build("ssn", r"\b\d{3}-\d{2}-\d{4}\b", "[SSN]"),
    RedactionRule.build(
        "credit_card", r"\b(?:\d{4}[ \-]?){3}\d{4}\b", "[CREDIT_CARD]"
    ),
    RedactionRule.build(
        "phone",
        r"(?<![\w-])(?:\+?1[\s.\-]?)?(?:\(\d{3}\)\s?|\d{3}[\s.\-]?)\d{3}[\s.\-]?\d{4}(?![\w-])",
        "[PHONE]",
    ),
    RedactionRule.build(
        "ip_address",
        r"\b(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|1?\d?\d)\b",
        "[IP_ADDRESS]",
    ),
    RedactionRule.build(
        "url", r"\b(?:https?://|www\.)[^\s<>\"']+", "[URL]", ignore_case=True
    ),
    RedactionRule.build(
        "street_address",
        rf"\b\d{{1,6}}\s+(?:{_CAPITALIZED}\s+){{1,4}}{_STREET_SUFFIX}\b\.?",
        "[ADDRESS]",
    ),
    RedactionRule.build("zip_code", r"\b\d{5}-\d{4}\b", "[ZIP]"),
    RedactionRule.build(
        "person_name",
        rf"\b{_HONORIFIC}\s+{_CAPITALIZED}(?:\s+{_CAPITALIZED})?",
        "[NAME]",
    ),
    RedactionRule.build(
        "person_name",
        rf"(?<=\b[Mm]y name is )(?:{_CAPITALIZED})(?:\s+{_CAPITALIZED})?",
        "[NAME]",
    ),
)


class Redactor:
    """Rule-based PHI/PII detector and replacer.

    Instances are immutable; use with_rules() to obtain a reconfigured one.
    """

    def __init__(self, rules: Iterable[RedactionRule] = DEFAULT_RULES):
        self._rules: tuple[RedactionRule, ...] = tuple(rules)

    @classmethod
    def from_config(cls, config: RedactionConfig) -> "Redactor":
        enabled = set(config.categories)
        rules = [rule for rule in DEFAULT_RULES if rule.category in enabled]
        rules.extend(RedactionRule.from_config(rule) for rule in config.custom_rules)
        return cls(rules)

    @property
    def rules(self) -> tuple[RedactionRule, ...]:
        return self._rules

    @property
    def categories(self) -> list[str]:
        return list(dict.fromkeys(rule.category for rule in self._rules))

    def with_rules(self, rules: Sequence[RedactionRule]) -> "Redactor":
        return Redactor(rules)

    def redact(self, text: str) -> str:
        """Replace every matched span with its category placeholder."""
        if not text:
            return text
        for rule in self._rules:
            text = rule.pattern.sub(rule.placeholder, text)
        return text

    def find(self, text: str) -> list[RedactionMatch]:
        """Return matches in the order the rules would redact them."""
        matches: list[RedactionMatch] = []
        if not text:
            return matches
        for rule in self._rules:
            for m in rule.pattern.finditer(text):
                matches.append(RedactionMatch(rule.category, m.start(), m.end()))
            text = rule.pattern.sub(rule.placeholder, text)
        return matches

    def contains_phi(self, text: str) -> bool:
        return self.redact(text) != text
