import logging

import pytest
from pydantic import ValidationError

from core.readiness import (
    FuelingEngine, FuelingLevel, ReadinessEstimator, ReadinessInput
)


@pytest.mark.parametrize("acute, chronic, rhr, hrv, coefficient, adjustment", [
    (140, 100, 0, 0, 1.4, -5.0),
    (120, 100, 0, 0, 1.2, -2.0),
    (100, 100, 6, -15, 1.1, 0.0),
    (70, 100, 0, 0, 0.7, 1.0),
    (0, 0, 0, 0, 0.4, 1.0),
    (500, 10, 0, 0, 2.0, -5.0),
])
def test_readiness_coefficient(acute, chronic, rhr, hrv, coefficient, adjustment):
    result = ReadinessEstimator().evaluate(ReadinessInput(
        acute_load=acute,
        chronic_load=chronic,
        resting_heart_rate_delta=rhr,
        hrv_delta_percent=hrv,
    ))
    assert result.fatigue_coefficient == pytest.approx(coefficient)
    assert result.pace_adjustment_percent == adjustment


def test_negative_load_is_rejected():
    with pytest.raises(ValidationError):
        ReadinessInput(acute_load=-1, chronic_load=10)


@pytest.mark.parametrize("weight, expected", [(40, 300), (70, 420), (100, 500)])
def test_starting_glycogen_is_clamped(weight, expected):
    assert FuelingEngine(weight).remaining_glycogen_grams == expected


def test_carb_fraction_by_zone():
    assert FuelingEngine.carb_fraction(0) == 0.40
    assert FuelingEngine.carb_fraction(3) == 0.60
    assert FuelingEngine.carb_fraction(5) == 0.85


def test_ingest_burns_glycogen_until_critical(caplog):
    engine = FuelingEngine(70)
    status = engine.ingest(10, 3)
    assert status.remaining_glycogen_grams == pytest.approx(418.5)
    assert status.level == FuelingLevel.NOMINAL

    engine.remaining_glycogen_grams = 36.0
    assert engine.ingest(8, 2).level == FuelingLevel.WARNING

    with caplog.at_level(logging.WARNING):
        status = engine.ingest(200, 4)
    assert status.remaining_glycogen_grams == 0.0
    assert status.level == FuelingLevel.CRITICAL
    assert "Glycogène critique" in caplog.text


def test_gels_refill_up_to_max():
    engine = FuelingEngine(70)
    engine.remaining_glycogen_grams = 10.0
    assert engine.log_gel().remaining_glycogen_grams == 35.0
    assert engine.log_gel().level == FuelingLevel.NOMINAL
    assert engine.log_gel(1000).remaining_glycogen_grams == 500.0
