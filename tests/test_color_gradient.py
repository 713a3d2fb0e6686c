import pytest

from planet_generator.color_gradient import FALLBACK_COLOR, Color, ColorGradient, GradientStop
from planet_generator.errors import PlanetConfigError

BLACK = Color(0.0, 0.0, 0.0)
RED = Color(1.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)


@pytest.fixture
def black_red_white():
    return ColorGradient([[0.0, 0x000000], [0.5, 0xFF0000], [1.0, 0xFFFFFF]])


class TestColor:
    def test_parse_notations(self):
        assert Color.parse(0xFF0000) == RED
        assert Color.parse("#ff0000") == RED
        assert Color.parse("white") == WHITE
        assert Color.parse({'r': 0.1, 'g': 0.2, 'b': 0.3}) == Color(0.1, 0.2, 0.3)
        assert Color.parse([0.5, 0.5, 0.5]) == Color(0.5, 0.5, 0.5)

    @pytest.mark.parametrize("value", ["no-such-color", True, 0x1000000, [1, 2], object()])
    def test_parse_rejects_garbage(self, value):
        with pytest.raises(PlanetConfigError):
            Color.parse(value)

    def test_hex_round_trip(self):
        assert Color.from_hex(0x994400).to_hex() == 0x994400

    def test_clamped(self):
        assert Color(1.5, 0.5, 2.0).clamped() == Color(1.0, 0.5, 1.0)


class TestColorGradient:
    def test_interpolates_between_stops(self, black_red_white):
        assert tuple(black_red_white.get(0.25)) == pytest.approx((0.5, 0.0, 0.0))
        assert tuple(black_red_white.get(0.75)) == pytest.approx((1.0, 0.5, 0.5))

    def test_clamps_outside_range(self, black_red_white):
        assert black_red_white.get(-5) == BLACK
        assert black_red_white.get(5) == WHITE

    def test_exact_stop_positions(self, black_red_white):
        assert tuple(black_red_white.get(0.5)) == pytest.approx(tuple(RED))
        assert black_red_white.get(0.0) == BLACK

    def test_empty_gradient_returns_fallback(self):
        gradient = ColorGradient()
        assert len(gradient) == 0
        assert gradient.get(0.3) == FALLBACK_COLOR
        assert FALLBACK_COLOR.to_hex() == 0xFF00CC

    def test_single_stop_is_constant(self):
        gradient = ColorGradient([[0.2, 0x00FF00]])
        assert gradient.get(-1) == gradient.get(1) == Color(0.0, 1.0, 0.0)

    def test_stops_are_sorted_on_insert(self):
        gradient = ColorGradient([[1.0, 0xFFFFFF], [0.0, 0x000000]])
        gradient.add_stop([0.5, 0xFF0000])
        assert [s.position for s in gradient.stops] == [0.0, 0.5, 1.0]
        assert tuple(gradient.get(0.25)) == pytest.approx((0.5, 0.0, 0.0))

    def test_between_spreads_colors_evenly(self):
        gradient = ColorGradient.between([0x000000, 0xFF0000, 0xFFFFFF], minimum=-1, maximum=1)
        assert [s.position for s in gradient.stops] == [-1.0, 0.0, 1.0]
        assert tuple(gradient.get(-0.5)) == pytest.approx((0.5, 0.0, 0.0))

    def test_between_needs_a_color(self):
        with pytest.raises(PlanetConfigError):
            ColorGradient.between([])

    def test_stop_easing_shapes_the_blend(self):
        gradient = ColorGradient([[0.0, 0x000000], [1.0, 0xFFFFFF, 'ease_in']])
        assert tuple(gradient.get(0.5)) == pytest.approx((0.25, 0.25, 0.25))

    def test_default_easing_applies_to_every_segment(self):
        gradient = ColorGradient({'stops': [[0.0, 0x000000], [1.0, 0xFFFFFF]], 'easing': 'smoothstep'})
        assert gradient.get(0.25).r == pytest.approx(0.15625)

    def test_unknown_easing_is_a_config_error(self):
        with pytest.raises(PlanetConfigError):
            ColorGradient([[0.0, 0x000000, 'bouncy']])

    def test_hsl_interpolation(self):
        gradient = ColorGradient({'stops': [[0.0, 0xFF0000], [1.0, 0x0000FF]], 'hsl': True})
        assert tuple(gradient.get(0.5)) == pytest.approx((0.0, 1.0, 0.0))

    def test_nested_gradient_uses_extra_coordinate(self):
        gradient = ColorGradient([
            [0.0, {'stops': [[0.0, 0x000000], [1.0, 0xFFFFFF]]}],
            [1.0, 0xFF0000],
        ])
        assert isinstance(gradient.stops[0].value, ColorGradient)
        assert gradient.dimensions() == 2
        assert gradient.get(0.0, 0.0) == BLACK
        assert gradient.get(0.0, 1.0) == WHITE
        assert tuple(gradient.get(0.5, 1.0)) == pytest.approx((1.0, 0.5, 0.5))

    def test_accepts_stop_objects_and_mappings(self):
        gradient = ColorGradient([
            GradientStop(0.0, BLACK),
            {'position': 1.0, 'value': '#ffffff'},
        ])
        assert tuple(gradient.get(0.5)) == pytest.approx((0.5, 0.5, 0.5))

    def test_malformed_stop(self):
        with pytest.raises(PlanetConfigError):
            ColorGradient([['low', 0x000000]])

    def test_get_array_matches_get(self, black_red_white):
        xs = [-1.0, 0.1, 0.25, 0.6, 2.0]
        colors = black_red_white.get_array(xs)
        assert colors.shape == (5, 3)
        for x, row in zip(xs, colors):
            assert tuple(row) == pytest.approx(tuple(black_red_white.get(x)))
