"""Usage and version information for the command line."""

from __future__ import annotations

import sys

VERSION = "1.0.0"

_USAGE = """\
Example usage:
./fleece -as=/usr/bin/as -norm -n=10 -arch=x86_64 -decoders=xed,gnu

Fleece arguments:

DATA:
    -rand                use only random instructions, do not generate extra inputs.
    -n=n                 generate n random byte sequences to begin input generation.


DECODING:
    -arch=architecture   (MANDATORY) choose from: x86_64, x86_32, aarch64, ppc, ppc_32
    -decoders=dec1,dec2  (MANDATORY) choose from: xed, dyninst, llvm, gnu, capstone


REASSEMBLY:
    -as=/usr/bin/as      (MANDATORY) absolute path to assembler
    -asopt=-opt1,-opt2   comma sep list of assembler options
                         ex. -asopt=-mregnames,-mpower9
    -asf=/tmp/tmp.s      absolute path to temporary assembly file produced by Fleece
                         default: /tmp/tmp.s


REPORTING:
    -o=output_dir        directory where output should be placed (rel. or abs.)
                         default: ./fleece_results/
    -t                   show timing information at the end of execution
    -no-nor              do not normalize the output of decoders before reassembly and reporting
                         Note: turning this on will result in reports being generated for
                         trivial differences. Generally, this should not be used.
    -bytes               print the raw bytes of an instruction before decoding
    -seed=n              specifies the seed for this execution of Fleece
    -pig                 print input generated by each decoder


MISC:
    -h, --help           print this menu and exit
    -v, --version        print version information and exit
"""


def usage_text() -> str:
    """The help text describing every command-line option."""
    return _USAGE


def version_text() -> str:
    """A one-line version string."""
    return f"Fleece version: {VERSION}"


def _emit(text: str) -> str:
    stream = sys.stdout
    stream.write(text)
    stream.flush()
    return text


def print_options() -> str:
    """Write the help text to standard output and return it."""
    return _emit(usage_text())


def print_version() -> str:
    """Write the version line to standard output and return it."""
    return _emit(version_text() + "\n")