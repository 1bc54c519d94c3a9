from __future__ import annotations
from pathlib import Path
from typing import Callable
from PyPDF2 import PdfMerger


class PdfDocument:
    """
    Output PDF assembled from imported sources.
    Nothing touches the filesystem until save(), so a failed import
    never leaves a partial output file behind. Use it as a context
    manager so the imported streams are closed on every path.
    """

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self._merger = PdfMerger()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._merger.close()

    def save(self) -> Path:
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with self.output_path.open("wb") as fh:
                self._merger.write(fh)
        except Exception:
            # don't leave a truncated file behind
            self.output_path.unlink(missing_ok=True)
            raise
        return self.output_path


def import_pdf(doc: PdfDocument, source: Path) -> None:
    """Append every page of ``source`` to ``doc``, after what is already there."""
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"PDF not found: {source}")
    doc._merger.append(str(source))


def merge_pdfs(inputs: list[Path], out_pdf: Path,
               status_cb: Callable[[str], None] | None = None,
               progress_cb: Callable[[int, int], None] | None = None) -> Path:
    """
    Concatenate PDFs in the given order into out_pdf.
    progress_cb(done, total) is called after each imported PDF.
    Any unreadable input aborts the whole merge.
    """
    total = len(inputs)
    with PdfDocument(out_pdf) as doc:
        for done, p in enumerate(inputs, start=1):
            if status_cb:
                status_cb(f"Merging: {Path(p).name}")
            import_pdf(doc, p)
            if progress_cb:
                progress_cb(done, total)
        return doc.save()
