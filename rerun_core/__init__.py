"""
rerun-tools: a metadata-driven registry and launcher for command scripts
-------------------------------------------------------------------------

Scripts are organised into modules, each exposing commands whose options are
declared as metadata records rather than parsed by hand.

Packages:
  core/     : Logging, config loading, file I/O, process launching
  engine/   : Metadata store, registry scanner, resolver, option schemas, dispatcher
  cli/      : Shared argument parser and safe CLI runner
"""

__version__ = "1.0.0"
