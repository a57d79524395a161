"""
Java Triggers - Keywords for Java rating classes.

Line triggers indent what they write with the leading whitespace of the
marker's line, so `    &FIELDS|` produces members at that depth.
"""

from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Sequence

from genowa.metadata import FieldDefinition
from genowa.naming import java_type, to_camel_case, to_getter, to_object_name, to_setter
from genowa.triggers.base import LineTrigger, TokenTrigger

if TYPE_CHECKING:
    from genowa.generator.context import GenerationContext
    from genowa.triggers.registry import TriggerRegistry


JAVA_INDENT = "    "


def field_name(fld: FieldDefinition) -> str:
    """Java member name: the long alias if there is one, else the column, in camelCase."""
    return to_camel_case(fld.long_alias or fld.name, capitalize_first=False)


def _accessor_base(fld: FieldDefinition) -> str:
    return fld.long_alias or fld.name


class ClassNameTrigger(TokenTrigger):
    """&CLASS| - class name: the output file name without `.java`."""
    keyword = "CLASS"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0)
        return PurePosixPath(context.gen_object.resolved_file_name()).stem


class ObjectNameTrigger(TokenTrigger):
    """&OBJ| or &OBJ|table| - entity class name of a table (POLICY_V -> Policy)."""
    keyword = "OBJ"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 0, 1)
        return to_object_name(context.table(params[0] if params else None).name)


class GetterTrigger(TokenTrigger):
    """&GETTER|column| - getter name (POLICY_NBR -> getPolicyNbr)."""
    keyword = "GETTER"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 1)
        return to_getter(self.non_empty_param(params, 0, "column"))


class SetterTrigger(TokenTrigger):
    """&SETTER|column| - setter name."""
    keyword = "SETTER"

    def replace(self, context: "GenerationContext", params: Sequence[str]) -> str:
        self.expect_params(params, 1)
        return to_setter(self.non_empty_param(params, 0, "column"))


class FieldsTrigger(LineTrigger):
    """&FIELDS| - one private member per table field."""
    keyword = "FIELDS"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        self.expect_params(params, 0, 1)
        indent = context.line_indent
        for fld in context.fields(params[0] if params else None):
            context.emit(f"{indent}private {java_type(fld)} {field_name(fld)};")


class AccessorsTrigger(LineTrigger):
    """&ACCESSORS| - getter and setter methods for every table field."""
    keyword = "ACCESSORS"

    def emit(self, context: "GenerationContext", params: Sequence[str]) -> None:
        self.expect_params(params, 0, 1)
        indent = context.line_indent
        body = indent + JAVA_INDENT
        for index, fld in enumerate(context.fields(params[0] if params else None)):
            if index:
                context.emit()
            name = field_name(fld)
            kind = java_type(fld)
            base = _accessor_base(fld)
            context.emit_lines([
                f"{indent}public {kind} {to_getter(base)}() {{",
                f"{body}return {name};",
                f"{indent}}}",
                "",
                f"{indent}public void {to_setter(base)}({kind} {name}) {{",
                f"{body}this.{name} = {name};",
                f"{indent}}}",
            ])


def register_java(registry: "TriggerRegistry") -> None:
    """Register the Java keywords."""
    registry.register_singleton("CLASS", ClassNameTrigger())
    registry.register_singleton("OBJ", ObjectNameTrigger())
    registry.register_singleton("GETTER", GetterTrigger())
    registry.register_singleton("SETTER", SetterTrigger())
    registry.register_singleton("FIELDS", FieldsTrigger())
    registry.register_singleton("ACCESSORS", AccessorsTrigger())
