import dataclasses
import json

import pytest

from cv_to_pdf.config import (
    Config,
    RenderSettings,
    default_config,
    merge_with_defaults,
    resolve,
    validate_config,
    validate_margin_value,
)
from cv_to_pdf.errors import ConfigurationError, ValidationError


def test_missing_file_returns_defaults_with_warning(tmp_path, logger):
    settings = resolve(tmp_path / "does-not-exist.json", logger=logger)

    assert settings == RenderSettings.defaults()
    logger.warning.assert_called_once()
    assert "does-not-exist.json" in logger.warning.call_args[0][0]


def test_defaults_match_builtin_values():
    settings = RenderSettings.defaults()

    assert settings.document.format == "A4"
    assert settings.document.scale == 0.95
    assert settings.document.print_background is True
    assert settings.document.margin.as_dict() == {
        "top": "15mm", "bottom": "15mm", "left": "10mm", "right": "10mm",
    }
    assert (settings.viewport.width, settings.viewport.height) == (1200, 1600)
    assert settings.viewport.device_scale_factor == 2
    assert settings.timeouts.page_load == 30000
    assert settings.timeouts.image_render == 1000
    assert settings.output.filename == "CV.pdf"


def test_overriding_one_margin_side_keeps_the_others(write_config, logger):
    path = write_config({"document": {"margin": {"top": "30mm"}}})

    margin = resolve(path, logger=logger).document.margin

    assert margin.top == "30mm"
    assert (margin.bottom, margin.left, margin.right) == ("15mm", "10mm", "10mm")


def test_sections_merge_field_by_field(write_config, logger):
    path = write_config({
        "document": {"format": "Letter"},
        "viewport": {"width": 800},
        "timeouts": {"imageRender": 0},
    })

    settings = resolve(path, logger=logger)

    assert settings.document.format == "Letter"
    assert settings.document.scale == 0.95
    assert settings.viewport.width == 800
    assert settings.viewport.height == 1600
    assert settings.timeouts.image_render == 0
    assert settings.timeouts.page_load == 30000
    logger.warning.assert_not_called()


def test_legacy_pdf_section_is_accepted(write_config, logger):
    path = write_config({"pdf": {"scale": 0.8, "margin": {"left": "5mm"}}})

    document = resolve(path, logger=logger).document

    assert document.scale == 0.8
    assert document.margin.left == "5mm"
    assert document.margin.top == "15mm"


def test_document_section_wins_over_legacy_alias():
    merged = merge_with_defaults({
        "pdf": {"format": "Legal", "margin": {"top": "1in", "left": "2mm"}},
        "document": {"format": "A3", "margin": {"top": "2in"}},
    })

    assert merged["document"]["format"] == "A3"
    assert merged["document"]["margin"] == {"top": "2in", "bottom": "15mm", "left": "2mm", "right": "10mm"}


def test_null_values_mean_not_set(write_config, logger):
    path = write_config({"document": {"scale": None, "format": None}, "output": {"filename": None}})

    settings = resolve(path, logger=logger)

    assert settings == RenderSettings.defaults()


@pytest.mark.parametrize("scale", [0, 1.5, -1, 1.0001, "0.5", True])
def test_scale_outside_domain_is_rejected(write_config, logger, scale):
    path = write_config({"document": {"scale": scale}})

    with pytest.raises(ConfigurationError) as excinfo:
        resolve(path, logger=logger)

    cause = excinfo.value.original_error
    assert isinstance(cause, ValidationError)
    assert excinfo.value.__cause__ is cause
    assert cause.field == "document.scale"


@pytest.mark.parametrize("scale", [0.1, 0.5, 0.95, 1, 1.0])
def test_scale_inside_domain_is_accepted(write_config, logger, scale):
    path = write_config({"document": {"scale": scale}})

    assert resolve(path, logger=logger).document.scale == scale


def test_malformed_json_is_a_configuration_error_not_a_validation_error(write_config, logger):
    path = write_config("{ not json")

    with pytest.raises(ConfigurationError) as excinfo:
        resolve(path, logger=logger)

    assert not isinstance(excinfo.value, ValidationError)
    assert isinstance(excinfo.value.original_error, json.JSONDecodeError)
    assert excinfo.value.code == "CONFIGURATION_ERROR"


def test_undecodable_file_falls_back_to_defaults(tmp_path, logger):
    path = tmp_path / "pdf-config.json"
    path.write_bytes(b"\xff\xfe\x00garbage\x80")

    assert resolve(path, logger=logger) == RenderSettings.defaults()
    logger.warning.assert_called_once()


def test_directory_instead_of_file_falls_back_to_defaults(tmp_path, logger):
    path = tmp_path / "pdf-config.json"
    path.mkdir()

    assert resolve(path, logger=logger) == RenderSettings.defaults()


@pytest.mark.parametrize("config, field", [
    ({"viewport": {"width": 0}}, "viewport.width"),
    ({"viewport": {"height": -10}}, "viewport.height"),
    ({"viewport": {"width": "wide"}}, "viewport.width"),
    ({"viewport": {"width": 0.5}}, "viewport.width"),
    ({"viewport": {"height": 1600.5}}, "viewport.height"),
    ({"viewport": {"deviceScaleFactor": 0.5}}, "viewport.deviceScaleFactor"),
    ({"viewport": {"deviceScaleFactor": 3.5}}, "viewport.deviceScaleFactor"),
    ({"timeouts": {"pageLoad": 0}}, "timeouts.pageLoad"),
    ({"timeouts": {"imageRender": -1}}, "timeouts.imageRender"),
    ({"document": {"format": 4}}, "document.format"),
    ({"document": {"printBackground": "yes"}}, "document.printBackground"),
    ({"document": {"margin": {"top": 10}}}, "document.margin.top"),
    ({"document": {"margin": {"left": "10"}}}, "document.margin.left"),
    ({"document": {"margin": {"right": "-5mm"}}}, "document.margin.right"),
    ({"document": {"margin": {"bottom": "4in"}}}, "document.margin.bottom"),
    ({"document": {"margin": "15mm"}}, "document.margin"),
    ({"output": {"filename": 12}}, "output.filename"),
    ({"output": {"filename": "  "}}, "output.filename"),
    ({"viewport": [800, 600]}, "viewport"),
    ({"pdf": {"scale": 2}}, "pdf.scale"),
])
def test_out_of_domain_fields_name_the_field(config, field):
    with pytest.raises(ValidationError) as excinfo:
        validate_config(config)

    assert excinfo.value.field == field


@pytest.mark.parametrize("raw, field", [
    ('{"document": {"scale": NaN}}', "document.scale"),
    ('{"viewport": {"width": Infinity}}', "viewport.width"),
    ('{"viewport": {"deviceScaleFactor": -Infinity}}', "viewport.deviceScaleFactor"),
    ('{"timeouts": {"pageLoad": NaN}}', "timeouts.pageLoad"),
])
def test_non_finite_numbers_are_configuration_errors(write_config, logger, raw, field):
    path = write_config(raw)

    with pytest.raises(ConfigurationError) as excinfo:
        resolve(path, logger=logger)

    assert excinfo.value.original_error.field == field


def test_whole_float_viewport_is_stored_as_pixels(write_config, logger):
    path = write_config('{"viewport": {"width": 1280.0}}')

    width = resolve(path, logger=logger).viewport.width

    assert width == 1280
    assert isinstance(width, int)


def test_top_level_must_be_an_object(write_config, logger):
    path = write_config("[1, 2, 3]")

    with pytest.raises(ConfigurationError) as excinfo:
        resolve(path, logger=logger)

    assert isinstance(excinfo.value.original_error, ValidationError)


@pytest.mark.parametrize("value", ["15mm", "0.5in", "2.5cm", "36pt", "96px", "0mm", "3in"])
def test_valid_margin_lengths(value):
    assert validate_margin_value(value, "document.margin.top") == value


def test_boundary_values_are_accepted():
    validate_config({
        "viewport": {"deviceScaleFactor": 1, "width": 1, "height": 1},
        "timeouts": {"imageRender": 0, "pageLoad": 1},
    })
    validate_config({"viewport": {"deviceScaleFactor": 3}})


def test_unknown_keys_are_ignored(write_config, logger):
    path = write_config({"theme": "dark", "document": {"landscape": True}})

    assert resolve(path, logger=logger).document.format == "A4"


def test_settings_are_immutable():
    settings = RenderSettings.defaults()

    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.document.scale = 0.5


def test_default_config_is_a_copy():
    config = default_config()
    config["document"]["margin"]["top"] = "99mm"

    assert default_config()["document"]["margin"]["top"] == "15mm"


def test_output_path_resolution(tmp_path):
    settings = RenderSettings.defaults()
    assert settings.output_path(tmp_path) == tmp_path / "CV.pdf"

    absolute = tmp_path / "out" / "resume.pdf"
    custom = RenderSettings.from_dict(merge_with_defaults({"output": {"filename": str(absolute)}}))
    assert custom.output_path("/somewhere/else") == absolute


def test_config_accessors(write_config, logger, tmp_path):
    path = write_config({"output": {"filename": "resume.pdf"}, "viewport": {"width": 1024}})

    config = Config(path, logger=logger)

    assert config.get_viewport().width == 1024
    assert config.get_pdf_options().format == "A4"
    assert config.get_timeouts().page_load == 30000
    assert config.get_output_path(tmp_path) == tmp_path / "resume.pdf"
