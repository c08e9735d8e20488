"""Filter decoder disagreements and write them to report files."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from types import TracebackType
from typing import Iterable, TextIO

from fleecekit.assembly import Assembly
from fleecekit.reassembly import AsmResult
from fleecekit.report import Report
from fleecekit.stringutils import asm_error_to_filename


def _has_reasm_error(assembly: Assembly) -> bool:
    return not assembly.is_error() and assembly.asm_result() is AsmResult.ERROR


class ReportingContext:
    """Collects reports of disagreeing decodings and writes them out.

    Reports are written every ``flush_freq`` reports. With ``random_only``
    set, a report is only issued when no equivalent report with the same
    template has been seen before.
    """

    def __init__(self, output_dir: str | Path, flush_freq: int, random_only: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.flush_freq = flush_freq
        self.random_only = random_only
        self.n_processed = 0
        self.n_matches = 0
        self.n_reports = 0
        self.n_suppressed = 0
        self.decoder_names: list[str] = []
        self._flush_count = 0
        self._queue: deque[Report] = deque()
        self._seen: dict[str, list[Report]] = {}
        self._files: dict[str, TextIO] = {}

    def __enter__(self) -> ReportingContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def add_decoder(self, name: str) -> None:
        """Name the next decoder; decodings are expected in the order names were added."""
        self.decoder_names.append(name)

    def process_decodings(self, assemblies: Iterable[Assembly]) -> int:
        """Report the decodings if they disagree; return the instruction length."""
        assemblies = list(assemblies)
        self.n_processed += 1
        if not assemblies:
            raise ValueError("no decodings to process")
        first, rest = assemblies[0], assemblies[1:]
        all_match = all(first.is_equivalent(other) for other in rest)

        report = Report(assemblies)
        if all_match:
            self.n_matches += 1
            return len(first.data)

        if not self.random_only or self._should_report_diff(report):
            self.n_reports += 1
            self._report_diff(report)
        else:
            self.n_suppressed += 1
        return len(first.data)

    def summary(self) -> str:
        """A one-line count of reports, matches and suppressed reports."""
        return (
            f"Reports: {self.n_reports}, Matches: {self.n_matches}, "
            f"Suppressed: {self.n_suppressed}"
        )

    def write_summary(self, stream: TextIO) -> None:
        """Write the summary line to ``stream``."""
        stream.write(self.summary() + "\n")

    def _should_report_diff(self, report: Report) -> bool:
        template = report.make_template()
        known = self._seen.get(template)
        if known is None:
            self._seen[template] = [Report(report.assemblies)]
            return True
        if any(report.is_equivalent(old) for old in known):
            return False
        known.append(Report(report.assemblies))
        return True

    def _report_diff(self, report: Report) -> None:
        self._queue.append(Report(report.assemblies))
        self._flush_count += 1
        if self._flush_count >= self.flush_freq:
            self.flush()
            self._flush_count = 0

    def _write_header(self, stream: TextIO) -> None:
        stream.write("".join(f"{name}; " for name in self.decoder_names) + "bytes\n")

    def _open(self, path: Path) -> TextIO:
        key = str(path)
        stream = self._files.get(key)
        if stream is None:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(path, "a+", encoding="utf-8")
            self._files[key] = stream
            stream.seek(0, 2)
            if stream.tell() == 0:
                self._write_header(stream)
        return stream

    def _close_files(self) -> None:
        while self._files:
            _, stream = self._files.popitem()
            stream.close()

    def _issue_to(self, report: Report, *parts: str) -> None:
        report.issue(self._open(self.output_dir.joinpath(*parts)))

    def flush(self) -> None:
        """Write every waiting report to its files."""
        while self._queue:
            report = self._queue.popleft()
            self._issue_to(report, "all_reports.txt")

            issued = False
            any_valid = False
            for index, assembly in enumerate(report.assemblies):
                if _has_reasm_error(assembly):
                    name = asm_error_to_filename(assembly.asm_error() or "")
                    self._issue_to(report, self.decoder_names[index], f"{name}.txt")
                    issued = True
                elif not assembly.is_error():
                    any_valid = True

            if any_valid:
                for index, assembly in enumerate(report.assemblies):
                    if assembly.is_error():
                        self._issue_to(report, self.decoder_names[index], "returned_invalid.txt")
                        issued = True

                reference: bytes | None = None
                agrees = True
                for assembly in report.assemblies:
                    if assembly.is_error() or assembly.asm_result() is AsmResult.ERROR:
                        continue
                    produced = assembly.asm_bytes() or b""
                    if not reference:
                        reference = produced
                    elif reference != produced:
                        agrees = False

                if not agrees:
                    for index, assembly in enumerate(report.assemblies):
                        if assembly.asm_result() is AsmResult.DIFFERENT:
                            self._issue_to(report, self.decoder_names[index], "diff_reasm.txt")
                            issued = True

            if not issued:
                self._issue_to(report, "unknown_issue.txt")
        self._close_files()

    def close(self) -> None:
        """Write waiting reports and close all files."""
        self.flush()
        self._close_files()