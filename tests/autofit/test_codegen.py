"""
Unit tests for the JavaScript emitter.

Test Coverage:
- emit_expr(): Parenthesization, Math.max, computed font size
- generate_title_fit_script(): Constants and loop shape for every bucket
- generate_viewport_fit_script(): Deferral, listeners, absolute transform
- generate_fit_text_script(), generate_bottom_reserve_script(),
  generate_layout_apply_script()
"""

import dataclasses

import pytest

from cardlayout.autofit import (
    emit_function,
    generate_bottom_reserve_script,
    generate_fit_text_script,
    generate_layout_apply_script,
    generate_title_fit_script,
    generate_viewport_fit_script,
    title_fit_program,
)
from cardlayout.autofit.codegen import (
    CONTAINER_CLASS_TOKENS,
    LAYOUT_CHANGE_EVENT,
    emit_expr,
    js_string,
)
from cardlayout.autofit.program import BinOp, Const, Max, Measure, Var
from cardlayout.config import FitConfig
from cardlayout.layout import DEFAULT_TITLE_CONFIGS, TitleFitConfig, calculate_standard_layout


def _balanced(source: str) -> bool:
    depth = 0
    for char in source:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


class TestEmitExpr:
    """Tests for expression emission."""

    def test_emit_when_nested_binop_then_parenthesized(self):
        expr = BinOp("-", Const(1040), BinOp("*", Var("a"), Const(2)))

        assert emit_expr(expr, top=True) == "1040 - (a * 2)"
        assert emit_expr(expr) == "(1040 - (a * 2))"

    def test_emit_when_max_then_math_max(self):
        expr = Max(Const(0.6), BinOp("/", Var("maxH"), Var("contentH")))

        assert emit_expr(expr) == "Math.max(0.6, maxH / contentH)"

    def test_emit_when_computed_font_size_then_get_computed_style(self):
        assert emit_expr(Measure("el", "fontSize")) == (
            "parseFloat(window.getComputedStyle(el).fontSize)"
        )

    def test_emit_when_string_const_then_script_safe(self):
        assert emit_expr(Const("</script>")) == '"<\\/script>"'

    def test_js_string_when_quotes_then_escaped(self):
        assert js_string('a "b"') == '"a \\"b\\""'


class TestTitleFitScript:
    """Tests for the Algorithm A script."""

    @pytest.mark.parametrize("bucket", sorted(DEFAULT_TITLE_CONFIGS))
    def test_generate_when_bucket_then_embeds_constants(self, bucket):
        # Arrange
        config = DEFAULT_TITLE_CONFIGS[bucket]

        # Act
        script = generate_title_fit_script(config)

        # Assert
        assert f"var size = {config.initial_font_size};" in script
        assert f"(size > {config.min_font_size})" in script
        assert "(title.scrollWidth > 1700)" in script
        assert "(guard < 100)" in script

    def test_generate_when_default_then_loop_shape(self):
        script = generate_title_fit_script(TitleFitConfig(initial_font_size=90, min_font_size=45))

        assert "size = size - 1;" in script
        assert "guard = guard + 1;" in script
        assert 'title.style.fontSize = size + "px";' in script
        assert script.index("var guard = 0;") < script.index("while (")

    def test_generate_when_step_two_then_decrements_by_two(self):
        config = TitleFitConfig(initial_font_size=60, min_font_size=30, step=2)

        assert "size = size - 2;" in generate_title_fit_script(config)

    def test_generate_when_custom_width_and_guard_then_embedded(self):
        config = TitleFitConfig(initial_font_size=60, min_font_size=30, max_width=1500)

        script = generate_title_fit_script(config, FitConfig(guard_limit=40))

        assert "(title.scrollWidth > 1500)" in script
        assert "(guard < 40)" in script

    def test_generate_when_emitted_then_selector_fallback_chain(self):
        script = generate_title_fit_script(DEFAULT_TITLE_CONFIGS["4"])

        positions = [
            script.index(f'document.querySelector("{s}")')
            for s in (".js-title-text", ".main-title", ".content-wrapper h1", "h1")
        ]
        assert positions == sorted(positions)
        assert "if (!title) return;" in script

    def test_generate_when_emitted_then_runs_now_and_after_fonts(self):
        script = generate_title_fit_script(DEFAULT_TITLE_CONFIGS["4"])

        assert "\n  fitTitle();\n" in script
        assert "document.fonts.ready" in script
        assert "setTimeout(resolve, 1500)" in script
        assert _balanced(script)

    def test_emit_function_when_same_config_then_identical(self):
        config = DEFAULT_TITLE_CONFIGS["7-8"]

        assert emit_function(title_fit_program(config)) == emit_function(title_fit_program(config))


class TestViewportFitScript:
    """Tests for the Algorithm B script."""

    def test_generate_when_default_then_embeds_budget_and_floor(self):
        script = generate_viewport_fit_script()

        assert "var maxH = Math.max(0, 1040 - reserve);" in script
        assert "scale = Math.max(0.6, maxH / contentH);" in script
        assert "var contentH = wrapper.scrollHeight;" in script

    def test_generate_when_emitted_then_transform_absolute_or_cleared(self):
        script = generate_viewport_fit_script()

        assert 'wrapper.style.transform = "scale(" + scale + ")";' in script
        assert 'wrapper.style.transformOrigin = "center center";' in script
        assert "wrapper.style.transform = '';" in script
        assert "*=" not in script

    def test_generate_when_emitted_then_deferred_and_listening(self):
        script = generate_viewport_fit_script()

        assert "setTimeout(fitViewport, 50);" in script
        assert "window.addEventListener('resize', scheduleFit);" in script
        assert f'window.addEventListener("{LAYOUT_CHANGE_EVENT}", scheduleFit);' in script
        assert "function readBottomReserve()" in script
        assert _balanced(script)

    def test_generate_when_custom_config_then_constants_follow(self):
        script = generate_viewport_fit_script(
            FitConfig(canvas_height=1200, safety_margin=0, min_scale=0.5, viewport_defer_ms=80)
        )

        assert "Math.max(0, 1200 - reserve)" in script
        assert "Math.max(0.5, maxH / contentH)" in script
        assert "setTimeout(fitViewport, 80);" in script


class TestOtherScripts:
    """Tests for the supporting scripts."""

    def test_fit_text_when_selector_then_loops_over_matches(self):
        script = generate_fit_text_script(".card-desc", min_font_size=14)

        assert 'document.querySelectorAll(".card-desc")' in script
        assert "el.style.fontSize = '';" in script
        assert "(el.scrollWidth > el.clientWidth)" in script
        assert "(fontSize > 14)" in script
        assert "(guard < 50)" in script
        assert _balanced(script)

    def test_bottom_reserve_when_value_then_embedded(self):
        script = generate_bottom_reserve_script(120)

        assert "var reserve = 120;" in script
        assert "p2vBottomReserved" in script
        assert LAYOUT_CHANGE_EVENT in script
        assert _balanced(script)

    def test_bottom_reserve_when_negative_then_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            generate_bottom_reserve_script(-1)

    def test_layout_apply_when_descriptor_then_embeds_json(self):
        layout = calculate_standard_layout(5)

        script = generate_layout_apply_script(layout)

        assert '"cardWidthClass": "card-width-3col"' in script
        assert f'"wrapperPaddingX": "{layout.wrapper_padding_x}"' in script
        assert "document.querySelectorAll('.card-item')" in script
        assert _balanced(script)

    def test_bottom_reserve_when_no_main_container_then_falls_back_to_class_search(self):
        # Act
        script = generate_bottom_reserve_script()

        # Assert
        fallback = script[script.index("if (!target) {"):script.index("if (!target) return;")]
        for token in CONTAINER_CLASS_TOKENS:
            assert f"cn.indexOf({js_string(token)}) !== -1" in fallback
        assert fallback.index("target = el;") < fallback.index("break;")
        assert _balanced(script)

    def test_layout_apply_when_single_card_then_inline_width(self):
        script = generate_layout_apply_script(calculate_standard_layout(1))

        assert '"cardWidthClass": "w-2/3"' in script
        assert "card.style.width = \"66.666%\";" in script
        assert "if (layout.cardWidthClass === \"w-2/3\")" in script
        assert script.index("card.style.width = '';") < script.index("card.classList.add(layout.cardWidthClass);")

    def test_layout_apply_when_value_contains_script_end_then_escaped(self):
        layout = dataclasses.replace(calculate_standard_layout(2), icon_size="</script>")

        script = generate_layout_apply_script(layout)

        assert "</script>" not in script
        assert '"iconSize": "<\\/script>"' in script
