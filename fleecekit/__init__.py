"""Toolkit for differential testing of instruction decoders."""

__version__ = "0.1.0"

__all__ = [
    "assembly",
    "bitfield",
    "fieldlist",
    "findlist",
    "info",
    "mappedinsn",
    "mask",
    "options",
    "reassembly",
    "registerset",
    "report",
    "reportingcontext",
    "simpleinsnmap",
    "stringutils",
]