from __future__ import annotations

import time

from caseflow.metrics import calculate_business_metrics


def test_sixty_periods_with_twenty_segments_is_fast(business_data):
    segments = []
    for k in range(20):
        segments.append(
            {
                "id": f"seg_{k}",
                "label": f"Segment {k}",
                "volume": {
                    "type": "pattern",
                    "pattern_type": ["geom_growth", "linear_growth", "seasonal_growth"][k % 3],
                    "series": [{"period": 1, "value": 100 + k}],
                    "monthly_growth_rate": 0.02,
                    "monthly_flat_increase": 3,
                    "base_year_total": 1200,
                    "seasonality_index_12": [1.0] * 12,
                    "yoy_growth": 0.05,
                },
            }
        )
    business_data["assumptions"]["customers"]["segments"] = segments

    started = time.perf_counter()
    metrics = calculate_business_metrics(business_data)
    elapsed = time.perf_counter() - started

    assert len(metrics.monthly_data) == 60
    assert metrics.total_revenue > 0
    assert elapsed < 0.1
