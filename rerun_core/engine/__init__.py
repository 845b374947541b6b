"""
rerun_core.engine

Module/command registry, resolution and dispatch.
"""

from rerun_core.engine.errors import (
    RerunError,
    UsageError,
    RerunSyntaxError,
    LookupFailure,
    ModuleNotFound,
    ScriptNotFound,
    OptionNotFound,
    InterpreterNotFound,
    MetadataError,
    DirectoryNotFound,
    RecordMissing,
    WriteFailed,
    MalformedRecord,
)
from rerun_core.engine.metadata import get_property, set_properties, read_record, has_record
from rerun_core.engine.scanner import list_modules, list_commands, list_options, scan
from rerun_core.engine.interpreters import AdapterRegistry, InterpreterAdapter
from rerun_core.engine.resolver import Resolver
from rerun_core.engine.options import Option, OptionSchemaEngine
from rerun_core.engine.answers import load_answers
from rerun_core.engine.dispatcher import Dispatcher

__all__ = [
    # Errors
    "RerunError",
    "UsageError",
    "RerunSyntaxError",
    "LookupFailure",
    "ModuleNotFound",
    "ScriptNotFound",
    "OptionNotFound",
    "InterpreterNotFound",
    "MetadataError",
    "DirectoryNotFound",
    "RecordMissing",
    "WriteFailed",
    "MalformedRecord",

    # Metadata store
    "get_property",
    "set_properties",
    "read_record",
    "has_record",

    # Registry
    "list_modules",
    "list_commands",
    "list_options",
    "scan",

    # Resolution and dispatch
    "AdapterRegistry",
    "InterpreterAdapter",
    "Resolver",
    "Option",
    "OptionSchemaEngine",
    "load_answers",
    "Dispatcher",
]
