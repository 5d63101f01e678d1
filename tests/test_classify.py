import math

from climateglobe.services.classify import (
    EONET_CATEGORY_RULES,
    category_for,
    clamp_intensity,
    classify,
    magnitude_severity,
    match_rules,
    severity_for,
)


def test_classify_flood_text() -> None:
    category, _ = classify("Major Flooding Event")
    assert category == "Flood"


def test_classify_default_storm() -> None:
    category, _ = classify("Severe Storms")
    assert category == "Storm"


def test_classify_rule_order_first_match_wins() -> None:
    # "flood" is checked before "fire"
    assert category_for("Flash Flood after Fire") == "Flood"
    assert category_for("FIRE MANAGEMENT") == "Wildfire"
    assert category_for("Earthquake") == "Earthquake"
    assert category_for("") == "Storm"
    assert category_for(None) == "Storm"


def test_eonet_rules() -> None:
    assert category_for("Wildfires", EONET_CATEGORY_RULES) == "Wildfire"
    assert category_for("Floods", EONET_CATEGORY_RULES) == "Flood"
    assert category_for("Seismic Activity", EONET_CATEGORY_RULES) == "Earthquake"
    assert category_for("Volcanoes", EONET_CATEGORY_RULES) == "Storm"


def test_fema_severity() -> None:
    assert severity_for("Hurricane") == "High"
    assert severity_for("Tornado") == "High"
    assert severity_for("Severe Storm") == "Medium"
    assert severity_for("Fire") == "Medium"
    assert severity_for("Biological") == "Low"


def test_magnitude_thresholds() -> None:
    assert magnitude_severity(5.0) == "High"
    assert magnitude_severity(6.3) == "High"
    assert magnitude_severity(4.99) == "Medium"
    assert magnitude_severity(4.0) == "Medium"
    assert magnitude_severity(3.9) == "Low"
    assert magnitude_severity(None) == "Low"
    assert magnitude_severity("bogus") == "Low"


def test_clamp_intensity() -> None:
    assert clamp_intensity(12) == 10.0
    assert clamp_intensity(-3) == 0.0
    assert clamp_intensity(math.nan) == 0.0
    assert clamp_intensity("7.5") == 7.5


def test_match_rules_custom_table() -> None:
    rules = ((("alpha",), "A"), (("alp",), "B"))
    assert match_rules("ALPHAbet", rules, "Z") == "A"
    assert match_rules("alps", rules, "Z") == "B"
    assert match_rules("beta", rules, "Z") == "Z"
