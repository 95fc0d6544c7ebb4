"""Context aggregation.

Collects bounded, relevant text from a project tree to send along with a
prompt: cached file reads, ignore rules, tree walks, path search, related-file
heuristics and size-budgeted assembly.

Usage:
    from codectx.context import ContextEngine

    engine = ContextEngine(root)
    print(engine.build_context("main.go"))
"""

from codectx.context.cache import CacheEntry, FileCache
from codectx.context.engine import ContextAssembler, ContextEngine
from codectx.context.ignore import IgnoreRules
from codectx.context.models import AssembledContext, ContextSection, SectionKind
from codectx.context.related import RelatedFileResolver
from codectx.context.walker import ProjectWalker, RelevanceFinder

__all__ = [
    "AssembledContext",
    "CacheEntry",
    "ContextAssembler",
    "ContextEngine",
    "ContextSection",
    "FileCache",
    "IgnoreRules",
    "ProjectWalker",
    "RelatedFileResolver",
    "RelevanceFinder",
    "SectionKind",
]
