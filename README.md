# fleecekit

fleecekit is a library for differential testing of instruction decoders.
You give the same bytes to several decoders, reassemble the text each one
returns, and it reports where they disagree. It filters out reports that
repeat a difference it has already seen.

## What is in it

- `fleecekit.fieldlist.FieldList` splits a decoded instruction such as
  `"add rax, 0x10"` into fields and the separators between them.
  `strip_hex()` and `strip_digits()` replace immediates with `IMM`, and
  `has_error()` tells you whether a field marks a failed decoding. The
  module function `is_separator(char)` says which characters split fields.
- `fleecekit.registerset.RegisterSet` replaces register names with one
  symbol, so instructions that differ only in their registers share a
  template. `RegisterSet.make_formatted(set_name, base_name, lower_bound,
  upper_bound)` builds a set from a printf-style pattern such as `"r%d"`
  and a range of numbers.
- `fleecekit.bitfield.Bitfield` is built from decimal or hex text with
  `Bitfield.create(text)`. It returns `None` when the text is neither.
  `matches(buf, which_bit, n_bits)` gives the number of bits in a buffer
  that encode the value. The module also defines the bit labels
  `BIT_TYPE_STRUCTURAL`, `BIT_TYPE_RESERVED` and `BIT_TYPE_UNUSED`.
- `fleecekit.simpleinsnmap.SimpleInsnMap` flips each bit of an instruction,
  decodes it again, and records which field that bit changes.
  `fleecekit.mappedinsn.MappedInsn` refines this map. Its
  `queue_new_insns(queue, seen, decoders)` method appends new inputs
  whose templates are not yet in `seen`.
- `fleecekit.mask.Mask` sets, clears and counts through the bits of a
  buffer, following a pattern such as `"1111nnnn"`.
- `fleecekit.findlist.FindList` finds many substrings in one pass over a
  buffer. It calls `func(buf, position, arg)` for each one it finds.
- `fleecekit.reassembly` runs an external assembler on decoded text. It
  reads the `.text` section of the resulting ELF object with
  `read_text_section` and compares the bytes with the input. The results
  are `AsmResult` (`NONE`, `SUCCESS`, `DIFFERENT`, `ERROR`) and
  `ReassemblyOutcome`.
- `fleecekit.assembly.Assembly` holds one decoder's view of one input:
  the decoded text, its template, its fields and the reassembly result.
  Each of these is computed the first time you ask for it.
- `fleecekit.report.Report` groups the decodings of one instruction.
  `fleecekit.reportingcontext.ReportingContext` drops duplicates and writes
  reports under an output directory. It writes to `all_reports.txt`, and
  within each decoder's directory to `returned_invalid.txt`,
  `diff_reasm.txt` or a file named after the assembler's error. Anything
  that fits none of these goes to `unknown_issue.txt`. It can be used as a
  context manager.
- `fleecekit.stringutils` has bit-level buffer helpers such as
  `get_buffer_bit`, `set_buffer_bit` and `flip_buffer_bit`, and
  `signals_error`. It also has `asm_error_to_filename`, which turns an
  assembler error message into a short file name.
- `fleecekit.options` stores command-line arguments with `parse(argv)`.
  `get(prefix)` returns the rest of the first argument that starts with the
  prefix. `fleecekit.info` provides `usage_text()`, `version_text()`,
  `print_options()` and `print_version()`.

## A quick look

```python
from fleecekit.fieldlist import FieldList
from fleecekit.registerset import RegisterSet

fields = FieldList("add rax, 0x10")
fields.strip_hex()
fields.strip_digits()

regs = RegisterSet.make_formatted("%gpr", "r%d", 0, 15)
regs.replace_reg_names_with_symbol(fields)

print(len(fields), str(fields))   # 3 add rax, IMM
```

```python
from fleecekit.mask import Mask

mask = Mask("1111nnnn")
buf = bytearray(b"\x47")
mask.apply(buf)      # buf == b"\xf0": top four bits set, counter is 0
mask.increment()
mask.apply(buf)      # buf == b"\xf1"
```

## Decoders

A decoder subclasses `fleecekit.simpleinsnmap.Decoder` and implements
`decode(data, normalize)`. It returns the decoded text, or raises
`fleecekit.simpleinsnmap.DecodeError` when the bytes cannot be decoded.
`SimpleInsnMap`, `MappedInsn` and `Assembly` all work through this
interface.

## Reassembly

`ReassemblyDaemon(assembler, options_string, output_filename)` holds the
assembler's command line. This is the program, then `-o` and the output
file (`/tmp/fl_rd.o` by default), then any comma-separated options.
`ReassemblyDaemon.reassemble(text)` runs the assembler once for each call,
with the text on standard input. It returns `None` on success, or the part
of the assembler's error output that follows its fifth colon.

`reassemble(data, text, daemon, max_len)` puts these pieces together. It
returns a `ReassemblyOutcome` that says whether the text assembled to the
same bytes, to different bytes, or failed to assemble.

## What it does not do

fleecekit has no command-line program. `info` and `options` provide the
usage text and argument lookup, but nothing here generates random inputs
or runs a full campaign. It also has no decoders for any instruction set,
and no built-in register sets for particular architectures. You supply
the decoders, and an optional normalizer for `Assembly` and `MappedInsn`,
and you drive the loop yourself.