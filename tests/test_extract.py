import pytest

from release_digest.extract import (
    PRODUCT_RULES,
    ReleaseRecord,
    clean_body,
    extract_announcement,
    extract_cves,
    extract_product_and_version,
    extract_release,
    strip_shortcodes,
)
from release_digest.sections import RawSection


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------

def test_clean_body_collapses_admonitions_and_trailing_space():
    body = "\n\n> [!NOTE]  \n> Read this.   \n\t\n>[!WARNING]\n  > [!tip]\nend \n\n"
    assert clean_body(body) == ">\n> Read this.\n\n>\n>\nend"


def test_clean_body_is_idempotent():
    body = "  \n> [!IMPORTANT]\n> text  \n\n- item\t\n\n"
    once = clean_body(body)
    assert clean_body(once) == once


def test_strip_shortcodes_removes_directive_and_newline():
    text = (
        '{{< release-date date="2025-01-01" >}}\n'
        "{{< desktop-install all=true beta_win_arm=true version=\"4.45.0\" >}}\n"
        '{{< desktop-install-v2 mac=true version="4.45.0" >}}\n'
        "kept\n"
    )
    cleaned = strip_shortcodes(
        text, ("release-date", "desktop-install", "desktop-install-v2")
    )
    assert cleaned == "kept\n"


def test_strip_shortcodes_leaves_other_directives():
    text = '{{< summary-bar feature_name="x" >}}\n{{< rss-button feed="/sec" >}}\n'
    assert strip_shortcodes(text, ("rss-button",)) == '{{< summary-bar feature_name="x" >}}\n'


def test_strip_shortcodes_is_case_insensitive():
    assert strip_shortcodes("{{< RSS-Button >}}\nbody", ("rss-button",)) == "body"


# ---------------------------------------------------------------------------
# Releases
# ---------------------------------------------------------------------------

def test_extract_release_fields():
    section = RawSection(
        heading="4.45.0",
        body=(
            '{{< release-date date="2025-08-28" >}}\n'
            '{{< desktop-install-v2 all=true version="4.45.0" >}}\n'
            "\n"
            "### New\n"
            "> [!NOTE]\n"
            "> Something new.  \n"
        ),
    )

    record = extract_release(section)

    assert record == ReleaseRecord(
        version="4.45.0",
        date="2025-08-28",
        details="### New\n>\n> Something new.",
    )


def test_release_version_is_leading_triple():
    record = extract_release(RawSection("4.44.3 (hotfix)", ""))
    assert record.version == "4.44.3"


def test_release_version_falls_back_to_heading():
    record = extract_release(RawSection("Docker Desktop for Windows", "text"))
    assert record.version == "Docker Desktop for Windows"
    assert record.date is None


def test_release_date_is_not_normalized():
    section = RawSection("4.0.0", '{{< release-date date="31 Aug 2021" >}}\n')
    assert extract_release(section).date == "31 Aug 2021"


# ---------------------------------------------------------------------------
# Security announcements
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "title, expected",
    [
        (
            "Docker Desktop 4.44.3 security update: CVE-2025-9074",
            ("Docker Desktop", "4.44.3"),
        ),
        (
            "Docker Security Advisory: Multiple Vulnerabilities in runc, BuildKit, and Moby",
            ("Docker Security Advisory", None),
        ),
        ("Docker Engine 25.0", ("Docker Engine", "25.0")),
        ("Moby v25.0.2: container breakout", ("Moby", "25.0.2")),
        ("runc - 1.1.12", ("runc", "1.1.12")),
        ("v1.2.3 hotfix", (None, "1.2.3")),
        ("Docker", ("Docker", None)),
        ("Text4Shell CVE-2022-42889", (None, None)),
        ("Dockerfile frontend issue", (None, None)),
    ],
)
def test_extract_product_and_version(title, expected):
    assert extract_product_and_version(title) == expected


def test_product_rules_are_tried_in_order():
    names = [rule.name for rule in PRODUCT_RULES]
    assert names == ["docker-product-version", "prefix-version", "docker-product"]

    # Every rule matches this title; the first one wins.
    title = "Docker Desktop 4.44.3 security update"
    assert PRODUCT_RULES[0].apply(title) == ("Docker Desktop", "4.44.3")
    assert PRODUCT_RULES[1].apply(title) == ("Docker Desktop", "4.44.3")
    assert PRODUCT_RULES[2].apply(title) == ("Docker Desktop", None)


def test_extract_cves_case_folded_and_deduplicated():
    assert extract_cves("CVE-2025-9074 and cve-2025-9074 again") == ("CVE-2025-9074",)


def test_extract_cves_sorted():
    text = "CVE-2024-21626, CVE-2024-1234567 and CVE-2023-0001"
    assert extract_cves(text) == ("CVE-2023-0001", "CVE-2024-1234567", "CVE-2024-21626")


def test_extract_announcement():
    section = RawSection(
        heading="Docker Desktop 4.44.3 security update: CVE-2025-9074",
        body=(
            "{{< rss-button feed=\"/security/index.xml\" >}}\n"
            "\n"
            "_Last updated August 20, 2025_\n"
            "\n"
            "> [!IMPORTANT]\n"
            "> Upgrade now. See also cve-2025-9074.   \n"
        ),
    )

    item = extract_announcement(section)

    assert item.title == "Docker Desktop 4.44.3 security update: CVE-2025-9074"
    assert item.last_updated_raw == "August 20, 2025"
    assert item.last_updated_iso == "2025-08-20"
    assert item.product == "Docker Desktop"
    assert item.version == "4.44.3"
    assert item.cves == ("CVE-2025-9074",)
    assert item.details_markdown == ">\n> Upgrade now. See also cve-2025-9074."


def test_announcement_without_last_updated_line():
    item = extract_announcement(RawSection("Some notice", "Nothing dated here."))
    assert item.last_updated_raw is None
    assert item.last_updated_iso is None
    assert item.product is None
    assert item.version is None
    assert item.cves == ()


def test_unparseable_last_updated_keeps_raw_text():
    item = extract_announcement(RawSection("Notice", "_Last updated sometime soon_\nbody"))
    assert item.last_updated_raw == "sometime soon"
    assert item.last_updated_iso is None
    assert item.details_markdown == "body"


def test_last_updated_prefix_is_case_insensitive():
    item = extract_announcement(RawSection("Notice", "_last Updated 2024-05-01_\nbody"))
    assert item.last_updated_iso == "2024-05-01"


def test_extract_cves_touching_word_characters():
    text = "Fixed _CVE-2025-9074_ and CVE-2024-21626_fix, not XCVE-2020-0001 or CVE-2024-12345678"
    assert extract_cves(text) == ("CVE-2024-21626", "CVE-2025-9074")


def test_announcement_details_are_fully_trimmed():
    item = extract_announcement(RawSection("T", "\n   Upgrade now.\n   "))
    assert item.details_markdown == "Upgrade now."
