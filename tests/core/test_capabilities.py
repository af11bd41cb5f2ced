import pytest

from vigil.core.capabilities import Capabilities, QuirkRule, applies_quirk, parse_major_version, select_quirk

SAFARI_12 = QuirkRule(browser_names=frozenset({"safari"}), min_version=12, managed_process=True)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("13", 13),
        ("13.1.2", 13),
        ("12abc", 12),
        (" 14", 14),
        (15, 15),
        ("abc", None),
        ("", None),
        ("١٣", None),
        ("١٣.1", None),
        (None, None),
    ],
)
def test_parse_major_version(raw, expected) -> None:
    assert parse_major_version(raw) == expected


def test_legacy_version_takes_precedence() -> None:
    capabilities = Capabilities.from_mapping({"browserName": "Safari", "version": "13", "browserVersion": "9"})

    assert capabilities.version == "13"
    assert capabilities.major_version == 13


def test_browser_version_used_when_legacy_missing() -> None:
    capabilities = Capabilities.from_mapping({"browserName": "Safari", "browserVersion": "16.4"})

    assert capabilities.version == "16.4"
    assert capabilities.major_version == 16


def test_empty_legacy_version_falls_back_to_browser_version() -> None:
    capabilities = Capabilities.from_mapping({"browserName": "Safari", "version": "", "browserVersion": "14"})

    assert capabilities.major_version == 14


@pytest.mark.parametrize("legacy", [0, False, None])
def test_falsy_legacy_version_falls_back_to_browser_version(legacy) -> None:
    capabilities = Capabilities.from_mapping(
        {"browserName": "Safari", "version": legacy, "browserVersion": "13"}, uses_managed_process=True
    )

    assert capabilities.legacy_version is None
    assert capabilities.major_version == 13
    assert applies_quirk(capabilities, SAFARI_12) is True


def test_non_ascii_digits_never_trigger_quirk() -> None:
    capabilities = Capabilities.from_mapping(
        {"browserName": "Safari", "browserVersion": "١٣"}, uses_managed_process=True
    )

    assert capabilities.major_version is None
    assert applies_quirk(capabilities, SAFARI_12) is False


@pytest.mark.parametrize(
    "raw,managed,expected,reason",
    [
        ({"browserName": "Safari", "browserVersion": "13"}, True, True, "safari 13 managed"),
        ({"browserName": "safari", "browserVersion": "12"}, True, True, "boundary version"),
        ({"browserName": "SAFARI", "version": "12.1"}, True, True, "legacy version field, upper case name"),
        ({"browserName": "Safari", "browserVersion": "11"}, True, False, "too old"),
        ({"browserName": "Safari", "browserVersion": "13"}, False, False, "remote browser"),
        ({"browserName": "Safari", "browserVersion": "abc"}, True, False, "unparseable version"),
        ({"browserName": "Safari"}, True, False, "no version"),
        ({"browserName": "chrome", "browserVersion": "100"}, True, False, "not safari"),
        ({"browserName": "Safari Technology Preview", "browserVersion": "13"}, True, False, "exact name match only"),
        ({"browserVersion": "13"}, True, False, "missing browser name"),
        ({"browserName": "Safari", "version": "9", "browserVersion": "13"}, True, False, "legacy version wins"),
    ],
)
def test_safari_quirk_rule(raw: dict, managed: bool, expected: bool, reason: str) -> None:
    capabilities = Capabilities.from_mapping(raw, uses_managed_process=managed)

    assert applies_quirk(capabilities, SAFARI_12) is expected, reason


def test_no_capabilities_never_applies() -> None:
    assert applies_quirk(None, SAFARI_12) is False


def test_environment_flag_can_be_ignored() -> None:
    rule = QuirkRule(browser_names=frozenset({"safari"}), min_version=12, managed_process=None)
    remote = Capabilities(browser_name="Safari", browser_version="13", uses_managed_process=False)

    assert applies_quirk(remote, rule) is True


def test_rule_accepts_single_browser_name() -> None:
    rule = QuirkRule(browser_names="Firefox", min_version=100, managed_process=None)

    assert rule.browser_names == frozenset({"firefox"})


def test_select_quirk_returns_first_match() -> None:
    capabilities = Capabilities(browser_name="Safari", browser_version="15", uses_managed_process=True)
    quirks = [
        (QuirkRule(browser_names=frozenset({"firefox"}), min_version=1), "firefox"),
        (SAFARI_12, "safari"),
        (QuirkRule(browser_names=frozenset({"safari"}), min_version=1, managed_process=None), "any-safari"),
    ]

    assert select_quirk(capabilities, quirks) == "safari"
    assert select_quirk(None, quirks) is None
