"""Tests for the generation driver."""

import pytest

from genowa.errors import (
    GenerationError,
    IncludeCycleError,
    InvalidParameter,
    MissingMapping,
    ParseError,
    TemplateNotFound,
    TriggerExecutionError,
    UnknownTrigger,
)
from genowa.generator import GenerationDriver
from genowa.genobj import cobol_rating_driver, java_rating_driver
from genowa.observability import get_metrics
from genowa.output import FileOutputWriter
from genowa.templates import FileTemplateRepository
from genowa.triggers import LineTrigger, TokenTrigger
from genowa.vocabulary import DriverState


MAIN = "cobol/cobol_rating_main.tpl"


class FooTrigger(TokenTrigger):
    keyword = "FOO"

    def replace(self, context, params):
        return "X"


class RowsTrigger(LineTrigger):
    """One `ROW name` line per field of the table parameter."""
    keyword = "ROWS"

    def emit(self, context, params):
        for fld in context.fields(params[0]):
            context.emit(f"ROW {fld.name}")


class RecordingTrigger(TokenTrigger):
    keyword = "REC"

    def __init__(self):
        self.calls = []

    def replace(self, context, params):
        self.calls.append(context.line_number)
        return ""


class BoomTrigger(TokenTrigger):
    keyword = "BOOM"

    def replace(self, context, params):
        raise ValueError("boom")


class NoTextTrigger(TokenTrigger):
    """Returns something that is not text."""
    keyword = "NOTEXT"

    def replace(self, context, params):
        return None


class BrokenRepository:
    """Template source that fails outside the error hierarchy."""

    def load(self, name):
        raise RuntimeError("disk on fire")

    def exists(self, name):
        return True


class MarkerTextTrigger(TokenTrigger):
    """Emits text that looks like a marker."""
    keyword = "LOOKALIKE"

    def replace(self, context, params):
        return "&BOGUS|"


@pytest.fixture
def registry(registry):
    registry.register_singleton("FOO", FooTrigger())
    registry.register_singleton("ROWS", RowsTrigger())
    registry.register_singleton("BOOM", BoomTrigger())
    registry.register_singleton("LOOKALIKE", MarkerTextTrigger())
    registry.register_singleton("NOTEXT", NoTextTrigger())
    return registry


# =============================================================================
# Output assembly
# =============================================================================

class TestOutput:
    """What a run produces."""

    @pytest.mark.parametrize("text", [
        "",
        "       IDENTIFICATION DIVISION.\n",
        "A\r\nB\r\n\r\nC",
        "mixed\r\nterminators\nno final newline",
        "if (a && b) { x = a & b; }\n",
    ])
    def test_marker_free_template_is_reproduced(self, make_driver, writer, text):
        """Templates without markers come out byte-for-byte."""
        result = make_driver({MAIN: text}).generate(cobol_rating_driver("BOP"))

        assert result.text == text
        assert writer.get("BOP", "output.cbl") == text

    def test_token_marker_is_spliced(self, make_driver):
        result = make_driver({MAIN: "pre &FOO|a| post\n"}).generate(cobol_rating_driver("BOP"))
        assert result.text == "pre X post\n"

    def test_keywords_resolve_case_insensitively(self, make_driver):
        result = make_driver({MAIN: "&foo|a| &Foo|b|\n"}).generate(cobol_rating_driver("BOP"))
        assert result.text == "X X\n"

    def test_line_trigger_replaces_line(self, make_driver):
        """A line trigger over three fields contributes exactly three lines."""
        template = "before\n   &ROWS|POLICY_V| trailing text\nafter\n"
        result = make_driver({MAIN: template}).generate(cobol_rating_driver("BOP"))

        assert result.text.splitlines() == [
            "before",
            "ROW POLICY_NBR",
            "ROW TERM_SEQ",
            "ROW BASE_PREM",
            "after",
        ]
        assert result.lines == 5

    def test_emitted_lines_use_template_newline(self, make_driver):
        result = make_driver({MAIN: "x\r\n&ROWS|POLICY_V|\r\n"}).generate(cobol_rating_driver("BOP"))
        assert result.text == "x\r\nROW POLICY_NBR\r\nROW TERM_SEQ\r\nROW BASE_PREM\r\n"

    def test_output_is_not_rescanned(self, make_driver):
        result = make_driver({MAIN: "&LOOKALIKE|\n"}).generate(cobol_rating_driver("BOP"))
        assert result.text == "&BOGUS|\n"

    def test_guard_drops_excluded_line(self, make_driver):
        template = "&!|NOHOST|\nkeep\n&<|NOHOST| dropped\n&<|OTHER| kept\n"
        result = make_driver({MAIN: template}).generate(cobol_rating_driver("BOP"))
        assert result.text == "keep\n kept\n"

    def test_guard_keeps_linkage_prefix(self, make_driver):
        template = "&!|LK|\n&<|LK| linkage\n"
        driver = make_driver({MAIN: template}, linkage_prefix="LK")
        assert driver.generate(cobol_rating_driver("BOP")).text == " linkage\n"

    def test_genfile_renames_output(self, make_driver, writer):
        result = make_driver({MAIN: "&GENFILE|R{ins_line}.cbl|\n"}).generate(cobol_rating_driver("bop"))

        assert result.file_name == "RBOP.cbl"
        assert writer.get("bop", "RBOP.cbl") == "\n"

    def test_java_default_file_name(self, make_driver, writer):
        driver = make_driver({"java/java_rating_main.tpl": "class &CLASS| {}\n"})
        result = driver.generate(java_rating_driver("cpp"))

        assert result.text == "class JavaCPPRatingDriver {}\n"
        assert result.output_path == "cpp/JavaCPPRatingDriver.java"


# =============================================================================
# Run states
# =============================================================================

class TestStates:
    """State history of a run."""

    def test_marker_free_line(self, make_driver):
        result = make_driver({MAIN: "plain\n"}).run(cobol_rating_driver("BOP"))
        assert result.history == [
            DriverState.LOADING, DriverState.SCANNING, DriverState.EMITTING, DriverState.DONE,
        ]

    def test_marker_line(self, make_driver):
        result = make_driver({MAIN: "&FOO|\n"}).run(cobol_rating_driver("BOP"))
        assert result.history == [
            DriverState.LOADING, DriverState.SCANNING, DriverState.RESOLVING,
            DriverState.EMITTING, DriverState.DONE,
        ]

    def test_empty_template(self, make_driver):
        result = make_driver({MAIN: ""}).run(cobol_rating_driver("BOP"))
        assert result.history == [DriverState.LOADING, DriverState.DONE]
        assert result.success

    def test_failed_run(self, make_driver):
        result = make_driver({MAIN: "&FOO|a\n"}).run(cobol_rating_driver("BOP"))
        assert result.state == DriverState.FAILED
        assert result.history[-2:] == [DriverState.SCANNING, DriverState.FAILED]
        assert not result.success
        assert result.text == ""


# =============================================================================
# Failures
# =============================================================================

class TestFailures:
    """Every error is fatal and nothing is written."""

    def test_unknown_trigger(self, make_driver, writer):
        with pytest.raises(UnknownTrigger) as exc:
            make_driver({MAIN: "ok\n  &BOGUS|1|\n"}).generate(cobol_rating_driver("BOP"))

        err = exc.value
        assert err.keyword == "BOGUS"
        assert err.template_name == MAIN
        assert err.line_number == 2
        assert err.column == 3
        assert "BOGUS" in str(err)
        assert len(writer) == 0

    def test_parse_error(self, make_driver, writer):
        with pytest.raises(ParseError) as exc:
            make_driver({MAIN: "one\ntwo\nxx &FOO|a\n"}).generate(cobol_rating_driver("BOP"))

        assert exc.value.line_number == 3
        assert exc.value.column == 4
        assert len(writer) == 0

    def test_markers_resolve_before_any_trigger_fires(self, make_driver, registry):
        recorder = RecordingTrigger()
        registry.register_singleton("REC", recorder)

        result = make_driver({MAIN: "&REC| &BOGUS|\n"}).run(cobol_rating_driver("BOP"))

        assert isinstance(result.error, UnknownTrigger)
        assert recorder.calls == []

    def test_foreign_exception_is_wrapped(self, make_driver):
        with pytest.raises(TriggerExecutionError) as exc:
            make_driver({MAIN: "\n&BOOM|\n"}).generate(cobol_rating_driver("BOP"))

        err = exc.value
        assert isinstance(err.cause, ValueError)
        assert err.keyword == "BOOM"
        assert err.line_number == 2

    def test_non_text_replacement_is_rejected(self, make_driver):
        result = make_driver({MAIN: "a &NOTEXT| b\n"}).run(cobol_rating_driver("BOP"))

        assert result.state == DriverState.FAILED
        assert isinstance(result.error, TriggerExecutionError)
        assert result.error.keyword == "NOTEXT"
        assert result.error.template_name == MAIN
        assert result.error.line_number == 1
        assert "None" in result.error.message

    def test_illegal_keyword_is_not_passed_through(self, make_driver, writer):
        result = make_driver({MAIN: "MOVE &WS-VARS|x| TO Y\n"}).run(cobol_rating_driver("BOP"))

        assert isinstance(result.error, ParseError)
        assert result.error.column == 6
        assert result.state == DriverState.FAILED
        assert len(writer) == 0

    def test_undecodable_template_fails_the_run(self, registry, metadata, writer, tmp_path):
        (tmp_path / "cobol").mkdir()
        (tmp_path / MAIN).write_bytes(b"ok line\n\xff\xfe bad\n")
        driver = GenerationDriver(registry, FileTemplateRepository(tmp_path), metadata, writer)

        results = driver.generate_many([cobol_rating_driver("BOP"), cobol_rating_driver("CPP")])

        assert [r.state for r in results] == [DriverState.FAILED, DriverState.FAILED]
        assert all(r.error.template_name == MAIN for r in results)
        assert results[0].history == [DriverState.LOADING, DriverState.FAILED]
        assert get_metrics().runs_failed.value == 2
        assert len(writer) == 0

    def test_unexpected_exception_still_fails_the_run(self, registry, metadata):
        driver = GenerationDriver(registry, BrokenRepository(), metadata)

        result = driver.run(cobol_rating_driver("BOP"))

        assert result.state == DriverState.FAILED
        assert type(result.error) is GenerationError
        assert isinstance(result.error.__cause__, RuntimeError)
        assert "disk on fire" in result.error.message
        assert get_metrics().active_runs.value == 0

        with pytest.raises(GenerationError):
            driver.generate(cobol_rating_driver("BOP"))

    def test_missing_mapping_is_wrapped(self, make_driver):
        with pytest.raises(TriggerExecutionError) as exc:
            make_driver({MAIN: "&TBL|NO_SUCH_TABLE|\n"}).generate(cobol_rating_driver("BOP"))

        assert isinstance(exc.value.cause, MissingMapping)
        assert exc.value.cause.keys == {"table": "NO_SUCH_TABLE"}
        assert exc.value.keyword == "TBL"

    def test_invalid_parameter_is_located(self, make_driver):
        with pytest.raises(InvalidParameter) as exc:
            make_driver({MAIN: "&WDATE|extra|\n"}).generate(cobol_rating_driver("BOP"))

        assert exc.value.template_name == MAIN
        assert exc.value.line_number == 1

    def test_missing_template(self, make_driver):
        with pytest.raises(TemplateNotFound):
            make_driver({}).generate(cobol_rating_driver("BOP"))

    def test_nothing_written_to_disk_on_failure(self, make_driver, tmp_path):
        driver = make_driver({MAIN: "line\n&BOGUS|\n"}, writer=FileOutputWriter(tmp_path))

        result = driver.run(cobol_rating_driver("BOP"))

        assert result.output_path is None
        assert list(tmp_path.iterdir()) == []

    def test_success_written_to_disk(self, make_driver, tmp_path):
        driver = make_driver({MAIN: "A\r\n"}, writer=FileOutputWriter(tmp_path))

        result = driver.generate(cobol_rating_driver("BOP"))

        assert (tmp_path / "BOP" / "output.cbl").read_bytes() == b"A\r\n"
        assert result.output_path == str(tmp_path / "BOP" / "output.cbl")


# =============================================================================
# Includes
# =============================================================================

class TestIncludes:
    """&INCLUDE| sub-templates."""

    def test_include_from_same_directory(self, make_driver):
        templates = {
            MAIN: "A\n&INCLUDE|sub.tpl|\nC &INSLINE|\n",
            "cobol/sub.tpl": "B &INSLINE|\n",
        }
        result = make_driver(templates).generate(cobol_rating_driver("BOP"))
        assert result.text == "A\nB BOP\nC BOP\n"

    def test_included_template_shares_context(self, make_driver):
        templates = {
            MAIN: "&INCLUDE|vars.tpl|\n&VAR1|\n",
            "cobol/vars.tpl": "&VAR1|set-inside| x\n",
        }
        result = make_driver(templates).generate(cobol_rating_driver("BOP"))
        assert result.text == " x\nset-inside\n"

    def test_include_cycle(self, make_driver):
        templates = {
            MAIN: "&INCLUDE|sub.tpl|\n",
            "cobol/sub.tpl": "&INCLUDE|cobol_rating_main.tpl|\n",
        }
        with pytest.raises(IncludeCycleError) as exc:
            make_driver(templates).generate(cobol_rating_driver("BOP"))

        assert exc.value.template_name == "cobol/sub.tpl"
        assert "cobol/sub.tpl -> cobol/cobol_rating_main.tpl" in str(exc.value)

    def test_include_depth_limit(self, make_driver):
        templates = {
            MAIN: "&INCLUDE|a.tpl|\n",
            "cobol/a.tpl": "&INCLUDE|b.tpl|\n",
            "cobol/b.tpl": "deep\n",
        }
        with pytest.raises(TriggerExecutionError, match="Include depth"):
            make_driver(templates, max_include_depth=2).generate(cobol_rating_driver("BOP"))

    def test_missing_include(self, make_driver):
        with pytest.raises(TemplateNotFound) as exc:
            make_driver({MAIN: "\n&INCLUDE|nope.tpl|\n"}).generate(cobol_rating_driver("BOP"))
        assert exc.value.line_number == 2
        assert exc.value.keyword == "INCLUDE"


# =============================================================================
# Concurrency and metrics
# =============================================================================

class TestConcurrentRuns:
    """Runs sharing one driver and registry."""

    def test_runs_do_not_interleave(self, make_driver, writer):
        codes = [f"L{i:02d}" for i in range(12)]
        driver = make_driver({MAIN: "&INSLINE| &ROWS|POLICY_V|\n&INSLINE|\n" * 20})

        results = driver.generate_many([cobol_rating_driver(c) for c in codes], max_workers=6)

        assert [r.gen_object.ins_line_cd for r in results] == codes
        for code, result in zip(codes, results):
            assert result.success
            rows = "ROW POLICY_NBR\nROW TERM_SEQ\nROW BASE_PREM\n"
            assert result.text == (rows + f"{code}\n") * 20
            assert writer.get(code, "output.cbl") == result.text
        assert len({r.run_id for r in results}) == len(codes)

    def test_failures_are_isolated(self, make_driver):
        driver = make_driver({MAIN: "&COL|P|POLICY_V|04|\n"})

        results = driver.generate_many([cobol_rating_driver("BOP"), cobol_rating_driver("XXX")])

        assert results[0].text == "BASE_PREM\n"
        assert isinstance(results[1].error, TriggerExecutionError)

    def test_empty_batch(self, make_driver):
        assert make_driver({}).generate_many([]) == []


class TestMetrics:
    """Driver metrics."""

    def test_run_counters(self, make_driver):
        driver = make_driver({MAIN: "a\n&ROWS|POLICY_V|\n"})
        driver.run(cobol_rating_driver("BOP"))
        make_driver({MAIN: "&BOGUS|\n"}).run(cobol_rating_driver("BOP"))

        metrics = get_metrics()
        assert metrics.runs_total.value == 2
        assert metrics.runs_succeeded.value == 1
        assert metrics.runs_failed.value == 1
        assert metrics.active_runs.value == 0
        assert metrics.lines_emitted.value == 4
        assert metrics.triggers_fired.value == 1
        assert metrics.run_duration_seconds.count == 2

    def test_labels(self, make_driver):
        make_driver({MAIN: "&ROWS|POLICY_V|\n&INSLINE|\n"}).run(cobol_rating_driver("BOP"))
        make_driver({MAIN: "&BOGUS|\n"}).run(cobol_rating_driver("BOP"))

        metrics = get_metrics()
        assert metrics.triggers_fired.by_label() == {"INSLINE": 1, "ROWS": 1}
        assert metrics.runs_total.by_label() == {"cobol_rating": 2}
        assert metrics.runs_failed.by_label() == {"UnknownTrigger": 1}
