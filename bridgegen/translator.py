"""Runs the translation pipeline for single objects and batches"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable

from .config import GeneratorOptions
from .consistency import check_consistency
from .cpp_generator import CppGenerator
from .errors import MalformedDefinition, Violation, ViolationKind
from .ir_builder import build_object
from .layout import plan_layout
from .logging import get_logger
from .naming import as_snake_case
from .rust_generator import RustGenerator
from .syntax import ObjectDecl
from .validation import check

logger = get_logger("translator")


@dataclass(frozen=True)
class GeneratedArtifacts:
    """The three files generated for one object"""
    name: str
    header: str
    source: str
    shim: str

    @property
    def stem(self) -> str:
        return as_snake_case(self.name)

    def files(self) -> dict[str, str]:
        """Map of relative output path to content"""
        return {
            f"include/{self.stem}.h": self.header,
            f"src/{self.stem}.cpp": self.source,
            f"src/{self.stem}.rs": self.shim,
        }


@dataclass
class BatchResult:
    """Outcome of a batch; every object ends up in exactly one of the maps"""
    artifacts: dict[str, GeneratedArtifacts] = field(default_factory=dict)
    diagnostics: dict[str, list[Violation]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def translate(decl: ObjectDecl, options: GeneratorOptions = GeneratorOptions(),
              known_objects: Iterable[str] = ()) -> GeneratedArtifacts:
    """Translate one object definition.

    Raises MalformedDefinition when the definition cannot be bridged; in that
    case nothing is emitted. Raises SignatureMismatch if the emitted native
    and safe artifacts disagree, which indicates a generator defect.
    """
    known = set(known_objects) | {decl.name}

    obj = check(build_object(decl), known)
    plan = plan_layout(obj, known)
    logger.debug("%s: %d mirror slot(s)", obj.name, len(plan.mirrors))

    cpp = CppGenerator(obj, plan, options, known)
    header = cpp.generate_header()
    source = cpp.generate_source()
    shim = RustGenerator(obj, plan, options, known).generate()

    check_consistency(obj, header, source, shim, known)
    logger.debug("%s: generated %d properties, %d invokables, %d signals",
                  obj.name, len(obj.properties), len(obj.invokables), len(obj.signals))
    return GeneratedArtifacts(name=obj.name, header=header, source=source, shim=shim)


def translate_batch(decls: list[ObjectDecl],
                    options: GeneratorOptions = GeneratorOptions()) -> BatchResult:
    """Translate a compilation unit; one failing object does not stop the rest.

    Objects in the batch may hold owned handles to each other. An identifier
    used by more than one object fails every object that uses it.
    """
    result = BatchResult()
    # Unnamed objects fail on their own structure, not as duplicates of each other
    counts = Counter(d.name for d in decls if d.name)
    known = set(counts)

    for index, decl in enumerate(decls):
        key = decl.name or f"<unnamed #{index}>"
        if counts[decl.name] > 1:
            if decl.name not in result.diagnostics:
                result.diagnostics[decl.name] = [Violation(
                    ViolationKind.DUPLICATE_OBJECT,
                    f"object {decl.name}",
                    f"defined {counts[decl.name]} times in the same batch",
                )]
                logger.debug("%s: defined %d times", decl.name, counts[decl.name])
            continue

        try:
            result.artifacts[decl.name] = translate(decl, options, known)
        except MalformedDefinition as exc:
            result.diagnostics[key] = exc.violations
            logger.debug("%s: %d violation(s)", key, len(exc.violations))
        else:
            logger.info("Translated %s", decl.name)

    return result
