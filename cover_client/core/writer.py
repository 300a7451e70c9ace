"""Write generated test classes to disk.

For every source file in the results, the matching test file under the
output directory is merged into when it already exists and created
otherwise. Files are written on a thread pool; failures are collected per
source file and reported together once every group has been attempted.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from cover_client.api.schemas import AnalysisResult
from cover_client.core.combiner import Combiner, get_file_name_for_result, group_results
from cover_client.core.filters import filter_results
from cover_client.core.options import DEFAULT_WRITING_CONCURRENCY, WriteTestsOptions
from cover_client.exceptions import WriterError, WriterErrorCode

logger = logging.getLogger(__name__)


class TestWriter:
    """Writes results as test files using a :class:`Combiner`."""

    __test__ = False  # not a pytest test class

    def __init__(self, combiner: Combiner):
        self.combiner = combiner

    def _write_group(
        self,
        directory_path: str,
        source_file_path: str,
        results: List[AnalysisResult],
        options: WriteTestsOptions,
    ) -> Optional[str]:
        kept = filter_results(results, options.filter)
        if not kept:
            return None
        test_directory = os.path.join(directory_path, os.path.dirname(source_file_path))
        os.makedirs(test_directory, exist_ok=True)
        file_path = os.path.join(test_directory, get_file_name_for_result(results[0]))

        try:
            with open(file_path, "r", encoding="utf-8") as fh:
                existing_class: Optional[str] = fh.read()
        except FileNotFoundError:
            existing_class = None

        if existing_class is not None:
            test_class = self.combiner.merge_into_test_class(existing_class, kept)
        else:
            test_class = self.combiner.generate_test_class(kept)

        with open(file_path, "w", encoding="utf-8") as fh:
            fh.write(test_class)
        logger.info(f"Wrote {len(kept)} test(s) to {file_path}")
        return file_path

    def write_tests(
        self,
        directory_path: str,
        results: List[AnalysisResult],
        options: Optional[WriteTestsOptions] = None,
    ) -> List[str]:
        """Write ``results`` below ``directory_path`` and return the sorted file paths."""
        options = options or WriteTestsOptions()
        concurrency = options.concurrency or DEFAULT_WRITING_CONCURRENCY
        try:
            os.makedirs(directory_path, exist_ok=True)
        except OSError as exc:
            raise WriterError(
                f"Could not create the directory {directory_path}:\n{exc}.",
                WriterErrorCode.DIR_FAILED,
            ) from exc

        grouped = group_results(results)
        written: List[str] = []
        errors: Dict[str, Exception] = {}

        with ThreadPoolExecutor(max_workers=concurrency) as pool:
            futures: List[Tuple[str, Future]] = [
                (source, pool.submit(self._write_group, directory_path, source, group, options))
                for source, group in grouped.items()
            ]
            for source, future in futures:
                try:
                    path = future.result()
                except Exception as exc:
                    logger.error(f"Writing tests for {source} failed: {exc}")
                    errors[source] = exc
                    continue
                if path:
                    written.append(path)

        if errors:
            details = "\n".join(f"source_file_path: {source}\n{exc}\n" for source, exc in errors.items())
            raise WriterError(
                f"Test writing failed for some results:\n{details}.",
                WriterErrorCode.WRITE_FAILED,
            )
        return sorted(written)
