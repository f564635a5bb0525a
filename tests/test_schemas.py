"""Unit tests for request parameters, settings and results."""

import pytest
from pydantic import ValidationError

from cl_image_fit.common.errors import SizeBudgetUnreachable
from cl_image_fit.common.schemas import (
    ConversionParams,
    ExportResult,
    ExportSettings,
    max_bytes_from_kb,
)
from cl_image_fit.utils.media_types import OutputFormat


def test_max_bytes_from_kb():
    assert max_bytes_from_kb(1024) == 1024 * 1024
    assert max_bytes_from_kb(50) == 51200
    assert max_bytes_from_kb(0.5) == 512
    assert max_bytes_from_kb(0.0001) == 1


def test_conversion_params_defaults():
    params = ConversionParams()

    assert params.format == OutputFormat.WEBP
    assert params.quality == 0.85
    assert params.max_bytes == 1024 * 1024
    assert params.media_type is None
    assert params.size.keep_aspect is True


def test_conversion_params_parse_format():
    assert ConversionParams(format="jpg").format == OutputFormat.JPEG
    assert ConversionParams(format="image/qoi").format == OutputFormat.QOI


def test_conversion_params_rejects_bad_values():
    with pytest.raises(ValidationError):
        _ = ConversionParams(format="bmp")
    with pytest.raises(ValidationError):
        _ = ConversionParams(quality=1.01)
    with pytest.raises(ValidationError):
        _ = ConversionParams(max_bytes=0)


def test_export_settings_defaults_and_bounds():
    settings = ExportSettings()
    assert (settings.floor_quality, settings.iterations, settings.margin) == (0.3, 12, 0.02)

    with pytest.raises(ValidationError):
        _ = ExportSettings(iterations=-1)
    with pytest.raises(ValidationError):
        _ = ExportSettings(floor_quality=2.0)


def test_export_result_budget():
    advisory = SizeBudgetUnreachable(max_bytes=2, actual_bytes=3, format=OutputFormat.PNG)
    result = ExportResult(
        data=b"abc", format=OutputFormat.PNG, width=1, height=1, max_bytes=2, advisory=advisory
    )

    assert result.size == 3
    assert not result.budget_met
    assert "exceeds the budget of 2 bytes" in str(result.advisory)
