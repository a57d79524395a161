"""
Generation Objects - Per-target choice of entry template and output name.

A target is data, not a subclass: each TargetVariant names its fixed main
template, the template directory it lives in and how its output file is
named by default. New targets are added with register_variant(); the
driver and the trigger registry never change for them.
"""

from dataclasses import dataclass
from threading import Lock

from genowa.vocabulary import ProcessType


@dataclass(frozen=True)
class TargetVariant:
    """
    Fixed description of one generation target.

    `default_file_name` may contain `{ins_line}`.
    """
    name: str
    main_template: str
    template_dir: str
    default_file_name: str
    process_type: ProcessType = ProcessType.RATING
    description: str = ""

    @property
    def template_path(self) -> str:
        if not self.template_dir:
            return self.main_template
        return f"{self.template_dir}/{self.main_template}"


COBOL_RATING_DRIVER = TargetVariant(
    name="cobol_rating",
    main_template="cobol_rating_main.tpl",
    template_dir="cobol",
    default_file_name="output.cbl",
    description="COBOL rating driver program",
)

JAVA_RATING_DRIVER = TargetVariant(
    name="java_rating",
    main_template="java_rating_main.tpl",
    template_dir="java",
    default_file_name="Java{ins_line}RatingDriver.java",
    description="Java rating driver class",
)


_variants: dict[str, TargetVariant] = {
    COBOL_RATING_DRIVER.name: COBOL_RATING_DRIVER,
    JAVA_RATING_DRIVER.name: JAVA_RATING_DRIVER,
}
_variants_lock = Lock()


def register_variant(variant: TargetVariant) -> TargetVariant:
    """Add a target. Re-registering a name replaces the earlier variant."""
    with _variants_lock:
        _variants[variant.name] = variant
    return variant


def get_variant(name: str) -> TargetVariant:
    with _variants_lock:
        variant = _variants.get(name)
    if variant is None:
        raise KeyError(f"Unknown target variant: {name}")
    return variant


def list_variants() -> list[str]:
    with _variants_lock:
        return sorted(_variants)


class GenerationObject:
    """
    One (insurance line, target) generation request.

    The insurance-line code and output file name are never None; unset
    values are the empty string.
    """

    def __init__(self, variant: TargetVariant, ins_line_cd: str | None = None, gen_file_name: str | None = None):
        self.variant = variant
        self.ins_line_cd = ins_line_cd
        self.gen_file_name = gen_file_name

    @property
    def ins_line_cd(self) -> str:
        return self._ins_line_cd

    @ins_line_cd.setter
    def ins_line_cd(self, value: str | None) -> None:
        self._ins_line_cd = value.strip() if value else ""

    @property
    def gen_file_name(self) -> str:
        return self._gen_file_name

    @gen_file_name.setter
    def gen_file_name(self, value: str | None) -> None:
        self._gen_file_name = value.strip() if value else ""

    @property
    def main_template_name(self) -> str:
        return self.variant.main_template

    @property
    def template_path(self) -> str:
        """Repository name of the entry template."""
        return self.variant.template_path

    def resolved_file_name(self) -> str:
        """The explicit output name, else the variant default."""
        if self.gen_file_name:
            return self.gen_file_name
        return self.variant.default_file_name.format(ins_line=self.ins_line_cd.upper())

    def __repr__(self) -> str:
        return (
            f"<GenerationObject {self.variant.name} ins_line={self.ins_line_cd!r} "
            f"file={self.resolved_file_name()!r}>"
        )


def cobol_rating_driver(ins_line_cd: str | None = None) -> GenerationObject:
    return GenerationObject(COBOL_RATING_DRIVER, ins_line_cd)


def java_rating_driver(ins_line_cd: str | None = None) -> GenerationObject:
    return GenerationObject(JAVA_RATING_DRIVER, ins_line_cd)


def create_generation_object(
    variant_name: str,
    ins_line_cd: str | None = None,
    gen_file_name: str | None = None,
) -> GenerationObject:
    """Factory for generation objects by target name."""
    return GenerationObject(get_variant(variant_name), ins_line_cd, gen_file_name)
