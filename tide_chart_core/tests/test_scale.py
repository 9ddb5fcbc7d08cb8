import math

import pytest

from tide_chart_core.const import DEFAULT_SCALE
from tide_chart_core.scale import DynamicScaleCalculator, ScaleCache, select_interval


def assert_arithmetic(scale, data):
    ticks = scale.ticks
    assert len(ticks) >= 2
    for a, b in zip(ticks, ticks[1:]):
        assert b - a == pytest.approx(scale.interval)
    assert scale.min == ticks[0]
    assert scale.max == ticks[-1]
    assert scale.min <= min(data)
    assert scale.max >= max(data)


def test_mixed_sign_levels():
    levels = [-150, 230, -80, 190]
    scale = DynamicScaleCalculator().calculate_scale(levels)
    assert scale.interval == 200
    assert scale.ticks == [-400, -200, 0, 200, 400]
    assert 0 in scale.ticks
    assert_arithmetic(scale, levels)
    assert scale.unit == "cm"


@pytest.mark.parametrize("samples", [[], None, [math.nan, math.inf], ["x", None]])
def test_default_scale_without_usable_levels(samples):
    assert DynamicScaleCalculator().calculate_scale(samples).as_dict() == DEFAULT_SCALE


@pytest.mark.parametrize(
    "levels",
    [[150, 230], [-20, 35], [0.5, 1.7], [-290, 480], [12.5, 13.25, 40.0], [-250, -120]],
)
def test_ticks_are_arithmetic_and_bracket_data(levels):
    assert_arithmetic(DynamicScaleCalculator().calculate_scale(levels), levels)


def test_positive_levels_far_from_zero():
    scale = DynamicScaleCalculator().calculate_scale([150, 230])
    assert scale.interval == 50
    assert scale.ticks == [100, 150, 200, 250]


def test_force_zero_widens_interval_to_respect_max_ticks():
    scale = DynamicScaleCalculator().calculate_scale([150, 230], {"force_zero": True})
    assert scale.ticks[0] == 0
    assert scale.interval == 100
    assert len(scale.ticks) <= 4


def test_single_value_is_centred():
    scale = DynamicScaleCalculator().calculate_scale([120, 120, 120])
    assert scale.interval == 50
    assert scale.ticks == [20, 70, 120, 170, 220]
    assert 120 - scale.min == scale.max - 120
    assert_arithmetic(scale, [120])


def test_single_value_half_width_rounds_up_to_interval():
    # |-250| * 0.5 = 125 -> 150
    scale = DynamicScaleCalculator().calculate_scale([-250])
    assert scale.min == -400
    assert scale.max == -100
    assert_arithmetic(scale, [-250])


def test_accepts_mappings_and_objects():
    class Sample:
        level = 200

    scale = DynamicScaleCalculator().calculate_scale([{"level": 100}, Sample(), math.nan])
    assert_arithmetic(scale, [100, 200])


def test_select_interval_falls_back_to_closest():
    # no preferred interval yields 3-4 ticks; ideal step is 1000 * 1.3 / 4 = 325
    assert select_interval(1000, [10, 25, 50, 100, 200], 3, 4, 4, 1.3) == 200
    assert select_interval(1000, [10, 400], 3, 4, 4, 1.3) == 400


def test_cached_result_is_a_copy():
    calc = DynamicScaleCalculator()
    first = calc.calculate_scale([-150, 230, -80, 190])
    first.ticks.append(999)
    first.min = -1

    second = calc.calculate_scale([-150, 230, -80, 190])
    assert second.ticks == [-400, -200, 0, 200, 400]
    assert second.min == -400


def test_options_are_part_of_cache_key():
    calc = DynamicScaleCalculator()
    plain = calc.calculate_scale([150, 230])
    zeroed = calc.calculate_scale([150, 230], {"force_zero": True})
    assert plain.ticks != zeroed.ticks


def test_nearby_datasets_do_not_share_cache_entries():
    calc = DynamicScaleCalculator()
    first = calc.calculate_scale([0, 100], {"margin_ratio": 0})
    second = calc.calculate_scale([0, 100.04], {"margin_ratio": 0})
    assert first.max >= 100
    assert second.max >= 100.04
    assert len(calc._cache) == 2


def test_cache_evicts_oldest():
    calc = DynamicScaleCalculator(cache_size=2)
    calc.calculate_scale([1, 2])
    calc.calculate_scale([3, 4])
    calc.calculate_scale([5, 6])
    assert len(calc._cache) == 2
    assert not any(key.startswith("scale:1.0,2.0|") for key in calc._cache._data)

    calc.clear_cache()
    assert len(calc._cache) == 0


def test_scale_cache_rejects_zero_size():
    with pytest.raises(ValueError):
        ScaleCache(0)


def test_invalid_options():
    with pytest.raises(ValueError):
        DynamicScaleCalculator().calculate_scale([1, 2], {"min_ticks": 5, "max_ticks": 4})
    with pytest.raises(ValueError):
        DynamicScaleCalculator().calculate_scale([1, 2], {"preferred_intervals": []})


def test_detailed_scale():
    detailed = DynamicScaleCalculator().calculate_detailed_scale([-150, 230, -80, 190])
    assert detailed.ticks == [-400, -200, 0, 200, 400]
    assert detailed.data_range == {"min": -150, "max": 230, "span": 380}
    assert detailed.margin == {"lower": 250, "upper": 170}
    assert detailed.quality["tick_count"] == 5
    assert detailed.quality["interval_type"] == "coarse"
    # tick score 0.9 (one over target), efficiency 380 / 800
    assert detailed.quality["score"] == pytest.approx((0.9 + 0.475) / 2)
    assert 0 <= detailed.quality["score"] <= 1


def test_detailed_interval_type_fine():
    detailed = DynamicScaleCalculator().calculate_detailed_scale([10, 30])
    assert detailed.interval <= 25
    assert detailed.quality["interval_type"] == "fine"
