"""
Common Triggers - Keywords shared by every target language.

All handlers here are stateless and safe to register as singletons; run
state (variables, exclusions, the current table) lives in the context.
"""

from typing import TYPE_CHECKING, Sequence

from genowa.metadata import normalize_element_code
from genowa.triggers.base import (
    BaseTrigger,
    LineTrigger,
    LinesEmitted,
    TokenReplacement,
    TokenTrigger,
    TriggerResult,
)
from genowa.vocabulary import LevelType

if TYPE_CHECKING:
    from genowa.generator.context import GenerationContext
    from genowa.triggers.registry import TriggerRegistry


VARIABLE_KEYWORDS = ("VAR1", "VAR2", "VAR3", "VAR4")


class WDateTrigger(TokenTrigger):
    """&WDATE| - run date as MM/DD/YYYY."""
    keyword = "WDATE"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return context.started_at.strftime("%m/%d/%Y")


class WTimeTrigger(TokenTrigger):
    """&WTIME| - run time as HH:MM:SS."""
    keyword = "WTIME"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return context.started_at.strftime("%H:%M:%S")


class InsLineTrigger(TokenTrigger):
    """&INSLINE| - the insurance-line code of the run."""
    keyword = "INSLINE"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return context.ins_line_cd


class VarTrigger(TokenTrigger):
    """
    &VARn|value| sets run variable n and emits nothing.
    &VARn| emits the variable's value.

    Reading a variable that was never set is an error.
    """

    def __init__(self, keyword: str):
        self.keyword = keyword.upper()

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0, 1)
        if params:
            context.set_variable(self.keyword, params[0])
            return ""
        value = context.get_variable(self.keyword)
        if value is None:
            raise self.invalid(f"{self.keyword} read before it was set")
        return value


class GenFileTrigger(TokenTrigger):
    """
    &GENFILE|name| - set the output file name of the run.

    `{ins_line}` in the name is replaced by the insurance-line code.
    """
    keyword = "GENFILE"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 1)
        name = self.non_empty_param(params, 0, "file name")
        context.gen_object.gen_file_name = name.replace("{ins_line}", context.ins_line_cd.upper())
        return ""


class UseTableTrigger(TokenTrigger):
    """&USETBL|table| - make `table` the current table for later markers."""
    keyword = "USETBL"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 1)
        context.use_table(self.non_empty_param(params, 0, "table name"))
        return ""


class TableNameTrigger(TokenTrigger):
    """&TBL| or &TBL|table| - table name as defined in the metadata."""
    keyword = "TBL"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0, 1)
        return context.table(params[0] if params else None).name


class ColumnTrigger(TokenTrigger):
    """
    &COL|level|element| or &COL|level|table|element|

    Column mapped to an element code (1-27) for the run's insurance line.
    Level is a level code (`P`, `$`, ...) or name (`PRIMARY`). Without a
    table parameter the current table is used.
    """
    keyword = "COL"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 2, 3)
        try:
            level = LevelType.parse(params[0])
        except ValueError as e:
            raise self.invalid(str(e)) from None
        try:
            element = normalize_element_code(params[-1])
        except ValueError as e:
            raise self.invalid(str(e)) from None
        table = params[1] if len(params) == 3 else None
        return context.column(level, element, table)


class ExcludeTrigger(LineTrigger):
    """&!|condition| - exclude `condition` for the rest of the run; the line emits nothing."""
    keyword = "!"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        self.expect_params(params, 1)
        context.exclude(self.non_empty_param(params, 0, "condition"))


class IncludeIfTrigger(BaseTrigger):
    """
    &<|condition| - guard for the rest of the line.

    The line is kept when the condition is the run's linkage prefix or has
    not been excluded; otherwise the whole line is dropped.
    """
    keyword = "<"

    def process(self, context: "GenerationContext", params: Sequence[str]) -> TriggerResult:
        self.expect_params(params, 1)
        condition = self.non_empty_param(params, 0, "condition")
        if condition.upper() == context.linkage_prefix.upper() or not context.is_excluded(condition):
            return TokenReplacement("")
        return LinesEmitted(0)


class IncludeTemplateTrigger(LineTrigger):
    """
    &INCLUDE|template| - expand another template in place of this line.

    Names without a directory resolve next to the including template.
    """
    keyword = "INCLUDE"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        self.expect_params(params, 1)
        context.include(self.non_empty_param(params, 0, "template name"))


def register_common(registry: "TriggerRegistry") -> None:
    """Register the target-independent keywords."""
    registry.register_singleton("WDATE", WDateTrigger())
    registry.register_singleton("WTIME", WTimeTrigger())
    registry.register_singleton("INSLINE", InsLineTrigger())
    for keyword in VARIABLE_KEYWORDS:
        registry.register_singleton(keyword, VarTrigger(keyword))
    registry.register_singleton("GENFILE", GenFileTrigger())
    registry.register_singleton("USETBL", UseTableTrigger())
    registry.register_singleton("TBL", TableNameTrigger())
    registry.register_singleton("COL", ColumnTrigger())
    registry.register_singleton("!", ExcludeTrigger())
    registry.register_singleton("<", IncludeIfTrigger())
    registry.register_singleton("INCLUDE", IncludeTemplateTrigger())
