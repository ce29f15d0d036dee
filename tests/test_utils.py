import pytest

from template_generator.renderer import GridStyle, InvalidParameter
from template_generator.utils import (
    DEFAULT_PIXELS_PER_UNIT,
    EXIT_GENERAL_ERROR,
    EXIT_INVALID_PARAMETER,
    EXIT_SUCCESS,
    TemplateConfig,
    Unit,
    load_template_config,
    parse_unit,
)


def test_exit_codes_are_distinct():
    assert len({EXIT_SUCCESS, EXIT_GENERAL_ERROR, EXIT_INVALID_PARAMETER}) == 3
    assert EXIT_SUCCESS == 0


def test_unit_defaults():
    assert DEFAULT_PIXELS_PER_UNIT == {Unit.PX: 1.0, Unit.IN: 100.0, Unit.MM: 5.0}
    assert TemplateConfig(unit="in").resolved_pixels_per_unit() == 100
    assert TemplateConfig(unit="mm").resolved_pixels_per_unit() == 5


def test_pixels_are_always_one_pixel_per_unit():
    assert TemplateConfig(unit="px", pixels_per_unit=300).resolved_pixels_per_unit() == 1


def test_explicit_pixels_per_unit_wins_over_default():
    assert TemplateConfig(unit="in", pixels_per_unit=300).resolved_pixels_per_unit() == 300


@pytest.mark.parametrize("ppu", [0, -2, "many"])
def test_bad_pixels_per_unit_is_rejected(ppu):
    with pytest.raises(InvalidParameter):
        TemplateConfig(unit="in", pixels_per_unit=ppu).resolved_pixels_per_unit()


def test_parse_unit():
    assert parse_unit("MM") is Unit.MM
    assert parse_unit(Unit.IN) is Unit.IN
    with pytest.raises(InvalidParameter):
        parse_unit("furlong")


def test_default_template_is_letter_dot_grid():
    request = TemplateConfig().to_request()

    assert (request.width, request.height) == (850, 1100)
    assert request.style is GridStyle.DOT
    assert request.distance == pytest.approx(25)
    assert request.margin == pytest.approx(50)
    assert request.size == 2


def test_size_is_not_scaled_by_pixels_per_unit():
    request = TemplateConfig(unit="mm", width=210, height=297, distance=5, size=1.5, margin=10).to_request()

    assert (request.width, request.height) == (1050, 1485)
    assert request.distance == pytest.approx(25)
    assert request.margin == pytest.approx(50)
    assert request.size == 1.5


def test_fractional_pixel_dimensions_are_truncated():
    request = TemplateConfig(unit="in", width=2.555, height=1.019).to_request()

    assert (request.width, request.height) == (255, 101)


def test_non_numeric_dimension_is_rejected():
    with pytest.raises(InvalidParameter, match="width"):
        TemplateConfig(width="wide").to_request()


def test_unknown_style_is_rejected_on_conversion():
    with pytest.raises(InvalidParameter):
        TemplateConfig(style="zigzag").to_request()


def test_with_overrides_skips_none_values():
    config = TemplateConfig(width=4).with_overrides(width=None, height=6)

    assert config.width == 4
    assert config.height == 6


def test_with_overrides_resets_scale_when_unit_changes():
    config = TemplateConfig(unit="in", pixels_per_unit=300).with_overrides(unit="mm")

    assert config.resolved_pixels_per_unit() == 5


def test_with_overrides_rejects_unknown_settings():
    with pytest.raises(InvalidParameter, match="colour"):
        TemplateConfig().with_overrides(colour="red")


def test_load_template_config(tmp_path):
    path = tmp_path / "template.yaml"
    path.write_text(
        "unit: mm\n"
        "width: 100\n"
        "height: 50\n"
        "style: graph\n"
        "distance: 5\n"
        "background-color: '#fafafa'\n"
    )

    config = load_template_config(path)

    assert parse_unit(config.unit) is Unit.MM
    assert config.style == "graph"
    assert config.background_color == "#fafafa"
    assert config.size == TemplateConfig().size

    request = config.to_request()
    assert (request.width, request.height) == (500, 250)
    assert request.style is GridStyle.GRAPH


def test_load_empty_template_config_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_template_config(path) == TemplateConfig()


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a\n- list\n",
        "shape: hexagon\n",
        "width: [unclosed\n",
    ],
)
def test_malformed_template_config_is_rejected(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)

    with pytest.raises(InvalidParameter):
        load_template_config(path)
