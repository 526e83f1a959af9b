"""PDF merging for dchangelog."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import fitz  # PyMuPDF

from .errors import MergeError, NoInputDocumentsError
from .fileio import write_atomically

logger = logging.getLogger(__name__)

DEFAULT_MERGED_OUTPUT = "merged_output.pdf"
INPUT_PATTERN = "*.pdf"


@dataclass
class MergeResult:
    """Outcome of a successful merge."""

    output_path: Path
    inputs: List[Path] = field(default_factory=list)
    page_count: int = 0


def find_input_documents(folder: Union[str, Path], exclude: Union[str, Path, None] = None) -> List[Path]:
    """Return the PDFs directly inside folder in merge order.

    Merge order is lexicographic by file name. ``exclude`` keeps the merge
    output from being picked up as one of its own inputs.
    """
    folder = Path(folder)
    excluded = Path(exclude).resolve() if exclude else None
    return sorted(
        (
            path
            for path in folder.glob(INPUT_PATTERN)
            if path.is_file() and path.resolve() != excluded
        ),
        key=lambda p: p.name,
    )


def merge_documents(
    folder: Union[str, Path],
    output_path: Union[str, Path] = DEFAULT_MERGED_OUTPUT,
) -> MergeResult:
    """Concatenate every PDF in folder into output_path."""
    folder = Path(folder)
    output_path = Path(output_path)

    if not folder.is_dir():
        raise MergeError(str(folder), "not a directory")

    inputs = find_input_documents(folder, exclude=output_path)
    if not inputs:
        raise NoInputDocumentsError(str(folder))

    logger.info(
        "Merging documents",
        extra={"folder": str(folder), "inputs": len(inputs), "output": str(output_path)},
    )

    merged = fitz.open()
    try:
        for path in inputs:
            try:
                with fitz.open(path) as source:
                    merged.insert_pdf(source)
            except Exception as e:
                raise MergeError(str(folder), f"{path.name}: {e}") from e
            logger.debug("Appended document", extra={"input": str(path)})

        page_count = merged.page_count
        try:
            data = merged.tobytes(garbage=3, deflate=True)
        except Exception as e:
            raise MergeError(str(folder), f"could not assemble output: {e}") from e
    finally:
        merged.close()

    try:
        write_atomically(data, output_path)
    except OSError as e:
        raise MergeError(str(folder), f"could not write {output_path}: {e}") from e

    return MergeResult(output_path=output_path, inputs=inputs, page_count=page_count)
