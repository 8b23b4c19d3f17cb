from __future__ import annotations

from caseflow.validation import (
    validate_business_data,
    validate_market_analysis,
    validate_market_data,
    validate_market_suite_data,
)


def _paths(issues) -> list[str]:
    return [i.path for i in issues]


def test_default_cases_are_valid(business_data, cost_savings_data, market_data):
    assert validate_business_data(business_data).valid
    assert validate_business_data(business_data).warnings == []
    assert validate_business_data(cost_savings_data).valid
    assert validate_market_data(market_data).valid
    assert validate_market_analysis(market_data).valid


def test_meta_errors(business_data):
    business_data["meta"]["title"] = " "
    business_data["meta"]["currency"] = "XYZ"
    business_data["meta"]["business_model"] = "barter"
    business_data["meta"]["periods"] = 0
    result = validate_business_data(business_data)
    assert not result.valid
    assert _paths(result.errors) == ["meta.title", "meta.currency", "meta.business_model", "meta.periods"]


def test_unit_sales_alias_is_accepted(business_data):
    business_data["meta"]["business_model"] = "unit_sales"
    assert validate_business_data(business_data).valid


def test_long_horizon_is_a_warning_not_an_error(business_data):
    business_data["meta"]["periods"] = 120
    result = validate_business_data(business_data)
    assert result.valid
    assert "meta.periods" in _paths(result.warnings)


def test_guidance_warns_on_unusual_assumptions(business_data):
    business_data["assumptions"]["customers"]["churn_pct"]["value"] = 0.5
    result = validate_business_data(business_data)
    assert result.valid
    assert "assumptions.customers.churn_pct" in _paths(result.warnings)
    assert any("outside the recommended range" in m for m in result.messages())


def test_value_with_rationale_must_hold_a_number(business_data):
    business_data["assumptions"]["pricing"]["avg_unit_price"]["value"] = "ten"
    result = validate_business_data(business_data)
    assert "assumptions.pricing.avg_unit_price.value" in _paths(result.errors)


def test_structural_errors(business_data):
    business_data["assumptions"]["opex"] = {"rent": 100}
    business_data["assumptions"]["customers"]["segments"] = "all"
    result = validate_business_data(business_data)
    assert {"assumptions.opex", "assumptions.customers.segments"} <= set(_paths(result.errors))


def test_savings_percentage_range(cost_savings_data):
    cost_savings_data["assumptions"]["cost_savings"]["baseline_costs"][1]["savings_potential_pct"]["value"] = 140
    result = validate_business_data(cost_savings_data)
    assert _paths(result.errors) == ["assumptions.cost_savings.baseline_costs[1].savings_potential_pct"]


def test_non_mapping_business_data():
    result = validate_business_data(None)
    assert not result.valid
    assert _paths(result.errors) == ["root"]


def test_market_funnel_warnings(market_data):
    del market_data["market_sizing"]["serviceable_addressable_market"]
    result = validate_market_data(market_data)
    assert result.valid
    assert "market_sizing.serviceable_addressable_market" in _paths(result.warnings)


def test_market_analysis_errors_and_warnings(market_data):
    market_data["market_sizing"]["serviceable_addressable_market"]["percentage_of_tam"]["value"] = 0
    market_data["market_share"]["target_position"]["target_share"]["value"] = 0.2
    market_data["competitive_landscape"]["competitors"].append({"name": "Giant", "market_share": 70})
    result = validate_market_analysis(market_data)

    assert not result.valid
    assert _paths(result.errors) == ["market_sizing.serviceable_addressable_market.percentage_of_tam"]
    assert "market_share.target_position.target_share" in _paths(result.warnings)
    assert "competitive_landscape.competitors" in _paths(result.warnings)


def test_market_analysis_requires_tam(market_data):
    del market_data["market_sizing"]["total_addressable_market"]
    result = validate_market_analysis(market_data)
    assert "market_sizing.total_addressable_market.base_value" in _paths(result.errors)


def test_market_analysis_flags_aggressive_target(market_data):
    market_data["market_share"]["target_position"]["target_share"]["value"] = 60
    result = validate_market_analysis(market_data)
    assert any("above 50%" in w.message for w in result.warnings)


def test_market_suite_empty_case_is_valid_with_module_warnings():
    result = validate_market_suite_data({})
    assert result.valid
    assert len(result.warnings) == 4


def test_market_suite_segment_total_above_hundred_is_an_error(market_data):
    market_data["customer_analysis"]["market_segments"].append({"id": "ent", "name": "Enterprise", "size_percentage": 40})
    result = validate_market_suite_data(market_data)
    assert not result.valid
    assert _paths(result.errors) == ["customer_analysis.market_segments"]
    assert result.errors[0].value == 120


def test_market_suite_landscape_without_detail(market_data):
    market_data["competitive_landscape"] = {"market_structure": {"barriers_to_entry": "low"}}
    result = validate_market_suite_data(market_data)
    paths = _paths(result.warnings)
    assert "competitive_landscape.competitors" in paths
    assert "competitive_landscape.competitive_advantages" in paths
