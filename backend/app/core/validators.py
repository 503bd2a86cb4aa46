"""
Input validation and sanitization utilities for survey requests.
"""
import html
import re
import uuid
from typing import Optional


# Question IDs are a 2-3 letter category prefix and a 3-digit number: "ds_001"
QUESTION_ID_PATTERN = re.compile(r"^[a-z]{2,3}_\d{3}$")

# Survey versions are "major.minor": "1.0"
SURVEY_VERSION_PATTERN = re.compile(r"^\d+\.\d+$")


class StringSanitizer:
    """
    String sanitization utilities for free-text fields shown back to users.
    """

    # Control characters to strip (except newlines, tabs, carriage returns)
    CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """
        Sanitize a respondent's name.

        Keeps letters, spaces, hyphens, apostrophes and periods, collapses
        whitespace and escapes HTML.

        Args:
            name: Name to sanitize

        Returns:
            Sanitized name (may be empty)
        """
        name = cls.CONTROL_CHARS_PATTERN.sub("", name).strip()
        name = re.sub(r"[^a-zA-ZÀ-ÿ\s\-'.]", "", name)
        name = re.sub(r"\s+", " ", name).strip()
        return html.escape(name)


class EmailValidator:
    """
    Email normalization and classification utilities.
    """

    # Addresses used by end-to-end test suites; their submissions are stored
    # with is_test=True and excluded from lookups and statistics
    TEST_EMAIL_DOMAINS = {
        "playwright.local",
        "test.example.com",
        "e2e.example.com",
        "test.local",
    }
    TEST_EMAIL_PREFIXES = (
        "test+",
        "e2e-",
        "e2e+",
        "playwright-",
        "playwright+",
        "cypress-",
        "cypress+",
    )

    # Free, ISP, privacy and disposable mail providers. Addresses on these
    # domains say nothing about the respondent's agency.
    PERSONAL_EMAIL_DOMAINS = frozenset(
        {
            # Major providers
            "gmail.com",
            "googlemail.com",
            "yahoo.com",
            "yahoo.co.uk",
            "yahoo.ca",
            "yahoo.com.au",
            "outlook.com",
            "outlook.co.uk",
            "hotmail.com",
            "hotmail.co.uk",
            "live.com",
            "live.co.uk",
            "msn.com",
            "icloud.com",
            "me.com",
            "mac.com",
            "aol.com",
            "protonmail.com",
            "proton.me",
            "pm.me",
            # Regional providers
            "mail.com",
            "email.com",
            "usa.com",
            "gmx.com",
            "gmx.net",
            "gmx.de",
            "web.de",
            "yandex.com",
            "yandex.ru",
            "mail.ru",
            "qq.com",
            "163.com",
            "126.com",
            "sina.com",
            "naver.com",
            "daum.net",
            "hanmail.net",
            "rediffmail.com",
            # ISPs
            "comcast.net",
            "verizon.net",
            "att.net",
            "sbcglobal.net",
            "bellsouth.net",
            "charter.net",
            "cox.net",
            "earthlink.net",
            "juno.com",
            "netzero.net",
            "optonline.net",
            "frontier.com",
            "windstream.net",
            "centurylink.net",
            # Privacy-focused
            "tutanota.com",
            "tutamail.com",
            "tuta.io",
            "fastmail.com",
            "fastmail.fm",
            "hushmail.com",
            "mailfence.com",
            "posteo.de",
            "posteo.net",
            "runbox.com",
            "zoho.com",
            "zohomail.com",
            # Disposable
            "mailinator.com",
            "guerrillamail.com",
            "tempmail.com",
            "10minutemail.com",
            "throwaway.email",
            "sharklasers.com",
            "yopmail.com",
            "getairmail.com",
            "discard.email",
            "fakeinbox.com",
            "trashmail.com",
        }
    )

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """
        Normalize email address for storage and lookup.

        Args:
            email: Email address to normalize

        Returns:
            Lower-cased email with surrounding whitespace removed
        """
        return email.strip().lower()

    @classmethod
    def is_test_email(cls, email: str) -> bool:
        """
        Check whether an email belongs to automated test traffic.

        Args:
            email: Email address to check

        Returns:
            True for test domains or test local-part prefixes
        """
        normalized = cls.normalize_email(email)
        local_part, _, domain = normalized.partition("@")
        if domain in cls.TEST_EMAIL_DOMAINS:
            return True
        return local_part.startswith(cls.TEST_EMAIL_PREFIXES)

    @classmethod
    def get_agency_domain(cls, email: str) -> Optional[str]:
        """
        Extract the organization domain from an email address.

        Args:
            email: Email address to classify

        Returns:
            Lower-cased domain, or None for personal mail providers and
            malformed addresses

        Example:
            >>> EmailValidator.get_agency_domain("Jane@BrightPath-ABA.com")
            'brightpath-aba.com'
            >>> EmailValidator.get_agency_domain("jane@gmail.com") is None
            True
        """
        local_part, at, domain = cls.normalize_email(email).rpartition("@")
        if not at or not local_part or not domain:
            return None
        if domain in cls.PERSONAL_EMAIL_DOMAINS:
            return None
        return domain


def is_valid_question_id(value: str) -> bool:
    return bool(QUESTION_ID_PATTERN.match(value))


def is_valid_survey_version(value: str) -> bool:
    return bool(SURVEY_VERSION_PATTERN.match(value))


def parse_results_handle(value: str) -> Optional[str]:
    """
    Normalize a UUID results handle.

    Args:
        value: Candidate handle from a URL

    Returns:
        The canonical lower-case UUID string, or None if value is not a UUID
    """
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        return None


# Two-letter codes for the 50 states and DC
US_STATE_CODES = frozenset(
    {
        "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA",
        "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA",
        "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ", "NM", "NY",
        "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX",
        "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    }
)


def normalize_state_code(value: str) -> Optional[str]:
    """
    Normalize a US state code.

    Args:
        value: Candidate code, any case

    Returns:
        Upper-case code, or None if it is not a US state or DC
    """
    code = value.strip().upper()
    return code if code in US_STATE_CODES else None
