"""
Generation Driver - Runs one template pass per generation object.

Run states:

    LOADING -> SCANNING -> RESOLVING -> EMITTING -> DONE
                  ^                        |
                  +------- next line ------+

SCANNING -> EMITTING is taken for lines without markers, LOADING -> DONE
for an empty template. FAILED is reachable from every non-final state.

Per line, every span is scanned before any marker is resolved, and every
marker is resolved before the first trigger fires, so a malformed or
unknown marker aborts the run before the line has side effects.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Iterable
from uuid import UUID

from genowa.config import DEFAULT_MAX_INCLUDE_DEPTH, GeneratorConfig
from genowa.errors import (
    GenerationError,
    IncludeCycleError,
    MissingMapping,
    TriggerExecutionError,
)
from genowa.generator.context import GenerationContext, create_context
from genowa.generator.scanner import LiteralSpan, MarkerSpan, scan_line
from genowa.genobj import GenerationObject
from genowa.metadata import MetadataProvider, load_metadata
from genowa.observability import LogContext, get_logger, get_metrics, set_position
from genowa.output import FileOutputWriter, OutputWriter
from genowa.templates import (
    FileTemplateRepository,
    Template,
    TemplateRepository,
    split_terminator,
    template_directory,
)
from genowa.triggers import (
    LinesEmitted,
    TokenReplacement,
    Trigger,
    TriggerRegistry,
    TriggerResult,
    create_default_registry,
)
from genowa.vocabulary import LEGAL_TRANSITIONS, DriverState


logger = get_logger("generator.driver")


# =============================================================================
# Run records
# =============================================================================

@dataclass
class GenerationRun:
    """
    State of one run in progress.

    The driver creates one per generate() call; nothing about a run is
    stored on the driver itself.
    """
    gen_object: GenerationObject
    context: GenerationContext
    state: DriverState = DriverState.LOADING
    history: list[DriverState] = field(default_factory=lambda: [DriverState.LOADING])
    error: GenerationError | None = None

    def transition(self, new_state: DriverState) -> None:
        if new_state not in LEGAL_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal driver transition {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def fail(self, error: GenerationError) -> None:
        self.error = error
        if self.state not in (DriverState.DONE, DriverState.FAILED):
            self.transition(DriverState.FAILED)


@dataclass
class GenerationResult:
    """Outcome of one run."""
    gen_object: GenerationObject
    run_id: UUID
    state: DriverState
    text: str = ""
    file_name: str = ""
    output_path: str | None = None
    lines: int = 0
    error: GenerationError | None = None
    history: list[DriverState] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == DriverState.DONE


# =============================================================================
# Driver
# =============================================================================

class GenerationDriver:
    """
    Orchestrates generation runs.

    Holds only shared, read-only collaborators (the trigger registry, the
    template and metadata sources, the output writer), so one driver can
    serve concurrent runs.
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        templates: TemplateRepository,
        metadata: MetadataProvider | None = None,
        writer: OutputWriter | None = None,
        linkage_prefix: str = "",
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        max_workers: int = 4,
    ):
        self.registry = registry
        self.templates = templates
        self.metadata = metadata
        self.writer = writer
        self.linkage_prefix = linkage_prefix
        self.max_include_depth = max_include_depth
        self.max_workers = max_workers

    def generate(self, gen_object: GenerationObject) -> GenerationResult:
        """
        Run one generation and write its output.

        Raises:
            GenerationError: the run failed; nothing was written
        """
        result = self.run(gen_object)
        if result.error is not None:
            raise result.error
        return result

    def generate_many(
        self,
        gen_objects: Iterable[GenerationObject],
        max_workers: int | None = None,
    ) -> list[GenerationResult]:
        """Run independent generations concurrently; results keep input order."""
        gen_objects = list(gen_objects)
        if not gen_objects:
            return []
        workers = min(max_workers or self.max_workers, len(gen_objects))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="genowa-run") as pool:
            return list(pool.map(self.run, gen_objects))

    def run(self, gen_object: GenerationObject) -> GenerationResult:
        """Run one generation; failures are reported in the result, not raised."""
        metrics = get_metrics()
        context = create_context(gen_object, self.metadata, linkage_prefix=self.linkage_prefix)
        run = GenerationRun(gen_object=gen_object, context=context)
        output_path: str | None = None

        target = gen_object.variant.name
        metrics.runs_total.inc(label=target)
        metrics.active_runs.inc()
        started = time.perf_counter()

        with LogContext(context.run_id, target=target, ins_line=gen_object.ins_line_cd):
            logger.info("Generation started: template=%s", gen_object.template_path)
            try:
                template = self.templates.load(gen_object.template_path)
                context.newline = template.newline
                context.includer = partial(self._include, run)
                self._process_template(run, template)
                set_position(None)
                output_path = self._write(run)
                run.transition(DriverState.DONE)
            except GenerationError as e:
                run.fail(e)
            except Exception as e:
                logger.exception("Unexpected failure in run")
                error = GenerationError(
                    f"Unexpected {type(e).__name__}: {e}",
                    template_name=context.template_name,
                    line_number=context.line_number,
                )
                error.__cause__ = e
                run.fail(error)
            finally:
                duration = time.perf_counter() - started
                metrics.active_runs.dec()
                metrics.run_duration_seconds.observe(duration)

            if run.error is None:
                metrics.runs_succeeded.inc(label=target)
                metrics.lines_emitted.inc(context.line_count, label=target)
                logger.info(
                    "Generation finished: %d lines -> %s (%.3fs)",
                    context.line_count, output_path or gen_object.resolved_file_name(), duration,
                )
            else:
                metrics.runs_failed.inc(label=type(run.error).__name__)
                logger.error(
                    "Generation failed: %s", run.error.message,
                    extra={
                        "template": run.error.template_name,
                        "line": run.error.line_number,
                        "keyword": run.error.keyword,
                    },
                )

        return GenerationResult(
            gen_object=gen_object,
            run_id=context.run_id,
            state=run.state,
            text=context.text if run.error is None else "",
            file_name=gen_object.resolved_file_name(),
            output_path=output_path,
            lines=context.line_count if run.error is None else 0,
            error=run.error,
            history=list(run.history),
            duration_seconds=duration,
        )

    # -------------------------------------------------------------------------
    # Template and line processing
    # -------------------------------------------------------------------------

    def _process_template(self, run: GenerationRun, template: Template) -> None:
        context = run.context
        context.template_stack.append(template.name)
        try:
            for index, raw in enumerate(template.lines):
                self._process_line(run, template.name, index + 1, raw)
        finally:
            context.template_stack.pop()

    def _process_line(self, run: GenerationRun, template_name: str, line_number: int, raw: str) -> None:
        context = run.context
        content, terminator = split_terminator(raw)
        context.template_name = template_name
        context.line_number = line_number
        context.line_indent = content[:len(content) - len(content.lstrip())]
        set_position(template_name, line_number)

        run.transition(DriverState.SCANNING)
        spans = list(scan_line(content, template_name, line_number))
        markers = [span for span in spans if isinstance(span, MarkerSpan)]

        if not markers:
            run.transition(DriverState.EMITTING)
            context.append_raw(raw)
            return

        run.transition(DriverState.RESOLVING)
        handlers = [self._resolve(marker, template_name, line_number) for marker in markers]

        run.transition(DriverState.EMITTING)
        pending = iter(handlers)
        parts: list[str] = []
        for span in spans:
            if isinstance(span, LiteralSpan):
                parts.append(span.text)
                continue
            result = self._fire(next(pending), span, context, template_name, line_number)
            if isinstance(result, LinesEmitted):
                return
            parts.append(result.text)
        context.append_raw("".join(parts) + terminator)

    def _resolve(self, marker: MarkerSpan, template_name: str, line_number: int) -> Trigger:
        try:
            return self.registry.resolve(marker.keyword)
        except GenerationError as e:
            raise e.locate(template_name, line_number, marker.keyword, marker.column)

    def _fire(
        self,
        handler: Trigger,
        marker: MarkerSpan,
        context: GenerationContext,
        template_name: str,
        line_number: int,
    ) -> TriggerResult:
        set_position(template_name, line_number, marker.keyword)
        logger.debug("Dispatch %s%s", marker.keyword, list(marker.params))
        get_metrics().triggers_fired.inc(label=marker.keyword)
        try:
            result = handler.process(context, marker.params)
        except MissingMapping as e:
            raise TriggerExecutionError(
                e.message, cause=e, template_name=template_name,
                line_number=line_number, column=marker.column, keyword=marker.keyword,
            ) from e
        except GenerationError as e:
            if e.template_name is None:
                e.locate(template_name, line_number, marker.keyword, marker.column)
            raise
        except Exception as e:
            raise TriggerExecutionError(
                f"{type(e).__name__}: {e}", cause=e, template_name=template_name,
                line_number=line_number, column=marker.column, keyword=marker.keyword,
            ) from e
        finally:
            # A nested include moves the context; put it back on this line
            context.template_name = template_name
            context.line_number = line_number
            set_position(template_name, line_number, marker.keyword)

        if isinstance(result, TokenReplacement) and not isinstance(result.text, str):
            raise TriggerExecutionError(
                f"Trigger returned non-text replacement {result.text!r}",
                template_name=template_name, line_number=line_number,
                column=marker.column, keyword=marker.keyword,
            )
        if not isinstance(result, (TokenReplacement, LinesEmitted)):
            raise TriggerExecutionError(
                f"Trigger returned unsupported result {result!r}",
                template_name=template_name, line_number=line_number,
                column=marker.column, keyword=marker.keyword,
            )
        return result

    def _include(self, run: GenerationRun, name: str) -> int:
        """Process another template into the run; returns lines written."""
        context = run.context
        stack = context.template_stack
        resolved = name
        if "/" not in name and stack:
            directory = template_directory(stack[-1])
            resolved = f"{directory}/{name}" if directory else name

        if resolved in stack:
            raise IncludeCycleError(f"Template include cycle: {' -> '.join(stack + [resolved])}")
        if len(stack) >= self.max_include_depth:
            raise TriggerExecutionError(
                f"Include depth exceeds {self.max_include_depth} at {resolved}"
            )

        template = self.templates.load(resolved)
        indent = context.line_indent
        before = context.line_count
        self._process_template(run, template)
        context.line_indent = indent
        return context.line_count - before

    def _write(self, run: GenerationRun) -> str | None:
        if self.writer is None:
            return None
        gen_object = run.gen_object
        try:
            return self.writer.write(gen_object.ins_line_cd, gen_object.resolved_file_name(), run.context.text)
        except (OSError, ValueError) as e:
            raise GenerationError(
                f"Could not write output: {e}", template_name=gen_object.template_path,
            ) from e


def create_driver(
    config: GeneratorConfig,
    registry: TriggerRegistry | None = None,
    metadata: MetadataProvider | None = None,
    writer: OutputWriter | None = None,
) -> GenerationDriver:
    """Factory wiring a driver from configuration."""
    if registry is None:
        registry = create_default_registry()
    if metadata is None and config.metadata_path is not None:
        metadata = load_metadata(config.metadata_path)
    return GenerationDriver(
        registry=registry,
        templates=FileTemplateRepository(config.template_root),
        metadata=metadata,
        writer=writer if writer is not None else FileOutputWriter(config.output_root),
        linkage_prefix=config.linkage_prefix,
        max_include_depth=config.max_include_depth,
        max_workers=config.max_workers,
    )
