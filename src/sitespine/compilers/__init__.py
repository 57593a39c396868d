"""Compiler steps."""

from sitespine.compilers.base import (
    Compiler,
    CopyStep,
    FunctionCompiler,
    ReadCompiler,
    SequenceCompiler,
    SnapshotCompiler,
    add_to_snapshot,
    compiler_seq,
    to_document,
)
from sitespine.compilers.pandoc import PandocCompiler, pandoc, parse_pandoc_metadata

__all__ = [
    "Compiler",
    "CopyStep",
    "FunctionCompiler",
    "ReadCompiler",
    "SequenceCompiler",
    "SnapshotCompiler",
    "add_to_snapshot",
    "compiler_seq",
    "to_document",
    "PandocCompiler",
    "pandoc",
    "parse_pandoc_metadata",
]
