"""
Unit tests for the native fit interpreter.

Test Coverage:
- fit_title(): Termination, convergence, step, measurement failures
- fit_viewport(): Floor, no-op, idempotence, bottom reserve
- fit_text(): Per-element shrink from the stylesheet size
- execute(): Malformed programs
"""

import math

import pytest

from cardlayout.autofit import (
    ProgramError,
    TitleFitResult,
    execute,
    fit_composition,
    fit_text,
    fit_title,
    fit_viewport,
)
from cardlayout.autofit.program import Assign, Const, Program, Target
from cardlayout.config import FitConfig
from cardlayout.layout import TitleFitConfig


class TestFitTitle:
    """Tests for Algorithm A."""

    @pytest.mark.parametrize(
        "initial, minimum",
        [(90, 45), (60, 30), (150, 10), (250, 20), (45, 45)],
    )
    def test_fit_when_never_fits_then_stops_at_floor_or_guard(
        self, stub_element, always_overflowing, initial, minimum
    ):
        """With a 2000px stub the loop runs min(100, initial - min) times."""
        # Arrange
        title = stub_element(always_overflowing)
        config = TitleFitConfig(initial_font_size=initial, min_font_size=minimum)

        # Act
        result = fit_title(title, config)

        # Assert
        assert result.iterations == min(100, initial - minimum)
        assert result.font_size == max(minimum, initial - 100)
        assert title.style["fontSize"] == f"{result.font_size}px"

    def test_fit_when_fits_at_42_then_stops_after_18_steps(self, stub_element):
        """Starting at 60 with step 1, a title fitting at <=42px ends at 42."""
        # Arrange
        title = stub_element(lambda size: 1700.0 if size <= 42 else 1750.0)
        config = TitleFitConfig(initial_font_size=60, min_font_size=30)

        # Act
        result = fit_title(title, config)

        # Assert
        assert result == TitleFitResult(font_size=42, iterations=18)
        assert title.style["fontSize"] == "42px"

    def test_fit_when_width_proportional_then_largest_fitting_size(self, stub_element):
        """A 25em-wide title fits at floor(1700 / 25) = 68px."""
        title = stub_element(lambda size: 25 * size)

        result = fit_title(title, TitleFitConfig(initial_font_size=90, min_font_size=45))

        assert result.font_size == 68

    def test_fit_when_step_two_then_shrinks_by_two(self, stub_element, always_overflowing):
        title = stub_element(always_overflowing)
        config = TitleFitConfig(initial_font_size=60, min_font_size=30, step=2)

        result = fit_title(title, config)

        assert result == TitleFitResult(font_size=30, iterations=15)
        assert [v for p, v in title.writes][:3] == ["60px", "58px", "56px"]

    def test_fit_when_already_fits_then_applies_initial_size_only(self, stub_element):
        title = stub_element(lambda size: 800.0)

        result = fit_title(title, TitleFitConfig(initial_font_size=90, min_font_size=45))

        assert result == TitleFitResult(font_size=90, iterations=0)
        assert title.writes == [("fontSize", "90px")]

    def test_fit_when_rerun_then_restarts_from_initial_size(self, stub_element):
        """A second run resets to the initial size instead of continuing to shrink."""
        # Arrange
        title = stub_element(lambda size: 25 * size)
        config = TitleFitConfig(initial_font_size=90, min_font_size=45)

        # Act
        first = fit_title(title, config)
        title.writes.clear()
        second = fit_title(title, config)

        # Assert
        assert first == second
        assert title.writes[0] == ("fontSize", "90px")

    def test_fit_when_zero_width_then_treated_as_fitting(self, stub_element):
        """Unmounted elements report 0 width and must not shrink."""
        title = stub_element(lambda size: 0.0)

        result = fit_title(title, TitleFitConfig(initial_font_size=72, min_font_size=36))

        assert result == TitleFitResult(font_size=72, iterations=0)

    def test_fit_when_width_unmeasurable_then_treated_as_fitting(self, stub_element, unmeasurable):
        title = stub_element(unmeasurable)

        result = fit_title(title, TitleFitConfig(initial_font_size=72, min_font_size=36))

        assert result.iterations == 0

    def test_fit_when_measurement_raises_then_treated_as_fitting(self, stub_element):
        title = stub_element(error=RuntimeError("element detached"))

        result = fit_title(title, TitleFitConfig(initial_font_size=72, min_font_size=36))

        assert result == TitleFitResult(font_size=72, iterations=0)

    def test_fit_when_no_title_then_returns_none(self):
        assert fit_title(None, TitleFitConfig(initial_font_size=72, min_font_size=36)) is None

    def test_fit_when_custom_guard_then_honoured(self, stub_element, always_overflowing):
        title = stub_element(always_overflowing)
        config = TitleFitConfig(initial_font_size=90, min_font_size=10)

        result = fit_title(title, config, fit_config=FitConfig(guard_limit=5))

        assert result == TitleFitResult(font_size=85, iterations=5)


class TestFitViewport:
    """Tests for Algorithm B."""

    def test_fit_when_very_tall_then_scale_clamped_to_floor(self, stub_element):
        """contentHeight 5000 gives max(0.6, 1040/5000 = 0.208) = 0.6."""
        wrapper = stub_element(height=5000)

        result = fit_viewport(wrapper)

        assert result.scale == 0.6
        assert result.max_height == 1040
        assert wrapper.style["transform"] == "scale(0.6)"
        assert wrapper.style["transformOrigin"] == "center center"

    def test_fit_when_slightly_tall_then_proportional_scale(self, stub_element):
        """1040 / 1600 = 0.65 is above the floor and applied as is."""
        wrapper = stub_element(height=1600)

        result = fit_viewport(wrapper)

        assert result.scale == pytest.approx(0.65)
        assert wrapper.style["transform"] == "scale(0.65)"

    def test_fit_when_ratio_below_floor_then_clamped_to_floor(self, stub_element):
        """1040 / 2000 = 0.52 is below the 0.6 floor."""
        wrapper = stub_element(height=2000)

        result = fit_viewport(wrapper)

        assert result.scale == 0.6
        assert wrapper.style["transform"] == "scale(0.6)"

    def test_fit_when_fits_then_no_transform(self, stub_element):
        wrapper = stub_element(height=900)

        result = fit_viewport(wrapper)

        assert result.scale == 1
        assert not result.scaled
        assert "transform" not in wrapper.style

    def test_fit_when_exactly_max_height_then_no_transform(self, stub_element):
        wrapper = stub_element(height=1040)

        assert fit_viewport(wrapper).scaled is False

    def test_fit_when_content_shrinks_then_prior_transform_cleared(self, stub_element):
        # Arrange
        wrapper = stub_element(height=3000)
        fit_viewport(wrapper)
        assert "transform" in wrapper.style

        # Act
        wrapper.height = 900
        fit_viewport(wrapper)

        # Assert
        assert "transform" not in wrapper.style
        assert wrapper.writes[-1] == ("transform", "")

    def test_fit_when_run_repeatedly_then_scale_does_not_compound(self, stub_element):
        wrapper = stub_element(height=1300)

        results = [fit_viewport(wrapper) for _ in range(3)]

        assert {r.scale for r in results} == {0.8}
        assert wrapper.style["transform"] == "scale(0.8)"

    def test_fit_when_bottom_reserve_then_budget_reduced(self, stub_element):
        wrapper = stub_element(height=1000)

        result = fit_viewport(wrapper, bottom_reserve=100)

        assert result.max_height == 940
        assert result.scale == pytest.approx(0.94)

    def test_fit_when_reserve_exceeds_canvas_then_budget_floors_at_zero(self, stub_element):
        wrapper = stub_element(height=500)

        result = fit_viewport(wrapper, bottom_reserve=5000)

        assert result.max_height == 0
        assert result.scale == 0.6

    def test_fit_when_height_unmeasurable_then_no_transform(self, stub_element):
        wrapper = stub_element(height=None)

        result = fit_viewport(wrapper)

        assert result.content_height == 0
        assert "transform" not in wrapper.style

    def test_fit_when_no_wrapper_then_returns_none(self):
        assert fit_viewport(None) is None


class TestFitComposition:
    """Tests for the ordered title + viewport run."""

    def test_fit_when_run_then_title_before_viewport(self, stub_element):
        # Arrange
        order = []
        title = stub_element(lambda size: 25 * size)
        wrapper = stub_element(height=1200)
        title.set_style = lambda p, v: order.append(("title", p))
        wrapper.set_style = lambda p, v: order.append(("wrapper", p))

        # Act
        fit_composition(title, wrapper, TitleFitConfig(initial_font_size=90, min_font_size=45))

        # Assert
        first_wrapper = order.index(("wrapper", "transform"))
        assert all(who == "title" for who, _ in order[:first_wrapper])


class TestFitText:
    """Tests for Algorithm C."""

    def test_fit_when_overflowing_then_shrinks_to_box(self, stub_element):
        """10px per font px in a 100px box settles at 10px."""
        el = stub_element(lambda size: 10 * size, client_width=100, base_font_size=16)

        [result] = fit_text([el], min_font_size=5)

        assert result.font_size == 10
        assert result.iterations == 6

    def test_fit_when_floor_reached_then_stops(self, stub_element):
        el = stub_element(lambda size: 10 * size, client_width=100, base_font_size=16)

        [result] = fit_text([el], min_font_size=12)

        assert result.font_size == 12

    def test_fit_when_inline_size_present_then_starts_from_stylesheet(self, stub_element):
        el = stub_element(lambda size: 10 * size, client_width=1000, base_font_size=16)
        el.style["fontSize"] = "40px"

        [result] = fit_text([el])

        assert result == type(result)(font_size=16, iterations=0)
        assert el.writes[0] == ("fontSize", "")

    def test_fit_when_font_size_unreadable_then_skipped(self, stub_element):
        el = stub_element(lambda size: 1000.0, client_width=10, base_font_size=None)

        [result] = fit_text([el])

        assert result.iterations == 0

    def test_fit_when_many_elements_then_one_result_each(self, stub_element):
        els = [stub_element(client_width=100) for _ in range(3)]

        assert len(fit_text(els)) == 3

    def test_fit_when_guard_exhausted_then_stops_at_fifty(self, stub_element):
        el = stub_element(lambda size: 1e6, client_width=10, base_font_size=200)

        [result] = fit_text([el], min_font_size=1)

        assert result.iterations == 50
        assert result.font_size == 150


class TestExecute:
    """Tests for interpreter error handling."""

    def test_execute_when_assign_undeclared_then_raises(self, stub_element):
        program = Program("bad", Target("el", ("h1",)), (Assign("x", Const(1)),))

        with pytest.raises(ProgramError, match="undeclared"):
            execute(program, stub_element())

    def test_execute_when_no_element_then_none(self):
        program = Program("noop", Target("el", ("h1",)), ())

        assert execute(program, None) is None

    def test_execute_when_env_missing_then_reads_zero(self, stub_element):
        from cardlayout.autofit.program import Env, Let

        program = Program("env", Target("el", ("h1",)), (Let("r", Env("bottomReserve")),))

        assert execute(program, stub_element()) == {"r": 0.0}
        assert not math.isnan(execute(program, stub_element(), {"bottomReserve": 7})["r"])
