"""Turn analysis results into test class source.

The source generation itself is delegated to a code generator object with
two methods::

    gen_test_class(test_data, class_name, test_name, package_name) -> str
    merge_tests(existing_class, test_data) -> str

This module validates and groups results, derives class and package names
from the tested function and maps results onto the generator's test data.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Protocol

from cover_client.api.schemas import AnalysisResult
from cover_client.exceptions import CombinerError, CombinerErrorCode

TEST_SUFFIX = "Test"
TEST_FILE_EXTENSION = ".java"

_JAVA_PREFIX = re.compile(r"^java::")
_CLASS_NAME = re.compile(r"([^.:]+)[.][^.]*$")


class CodeGenerator(Protocol):
    def gen_test_class(
        self,
        test_data: List[Dict[str, Any]],
        class_name: str,
        test_name: str,
        package_name: str,
    ) -> str: ...

    def merge_tests(self, existing_class: str, test_data: List[Dict[str, Any]]) -> str: ...


def parse_package_name(function_name: str) -> str:
    """``java::com.example.Game.play`` -> ``com.example``"""
    return ".".join(_JAVA_PREFIX.sub("", function_name).split(".")[:-2])


def parse_class_name(function_name: str) -> str:
    """``java::com.example.Game.play`` -> ``Game`` (``$`` becomes ``_``)"""
    match = _CLASS_NAME.search(function_name)
    if not match:
        raise CombinerError(f"Can't find classname in {function_name}", CombinerErrorCode.NO_CLASS_NAME)
    return match.group(1).replace("$", "_")


def get_file_name_for_result(result: AnalysisResult) -> str:
    return f"{parse_class_name(result.tested_function)}{TEST_SUFFIX}{TEST_FILE_EXTENSION}"


def group_results(results: List[AnalysisResult]) -> Dict[str, List[AnalysisResult]]:
    """Group results by source file, keeping first-seen order."""
    grouped: Dict[str, List[AnalysisResult]] = {}
    for result in results:
        grouped.setdefault(result.source_file_path, []).append(result)
    return grouped


def prepare_test_data(results: List[AnalysisResult]) -> List[Dict[str, Any]]:
    return [
        {
            "name": result.test_name,
            "test": result.test_body,
            "class_annotations": list(result.class_annotations),
            "imports": list(result.imports),
            "static_imports": list(result.static_imports),
        }
        for result in results
    ]


def check_results(results: Any) -> None:
    if results is None:
        raise CombinerError('Missing required parameter "results"', CombinerErrorCode.RESULTS_MISSING)
    if not isinstance(results, (list, tuple)):
        raise CombinerError('"results" must be a list', CombinerErrorCode.RESULTS_TYPE)
    if not results:
        raise CombinerError('"results" must not be empty', CombinerErrorCode.RESULTS_EMPTY)
    if not all(isinstance(result, AnalysisResult) for result in results):
        raise CombinerError('"results" must contain AnalysisResult objects', CombinerErrorCode.RESULTS_TYPE)
    if len({result.source_file_path for result in results}) != 1:
        raise CombinerError(
            'All "results" must have the same "source_file_path"',
            CombinerErrorCode.SOURCE_FILE_PATH_DIFFERS,
        )
    if len({parse_package_name(result.tested_function) for result in results}) != 1:
        raise CombinerError(
            'All "results" must test functions in the same package',
            CombinerErrorCode.PACKAGE_NAME_DIFFERS,
        )


def check_existing_class(existing_class: Any) -> None:
    if existing_class is None or existing_class == "":
        raise CombinerError('Missing required parameter "existing_class"', CombinerErrorCode.EXISTING_CLASS_MISSING)
    if not isinstance(existing_class, str):
        raise CombinerError('"existing_class" must be a string', CombinerErrorCode.EXISTING_CLASS_TYPE)


class Combiner:
    """Validates results and feeds them to a :class:`CodeGenerator`."""

    def __init__(self, generator: CodeGenerator):
        self.generator = generator

    def generate_test_class(self, results: List[AnalysisResult]) -> str:
        """Create a new test class from results sharing one source file."""
        check_results(results)
        tested_function = results[0].tested_function
        class_name = parse_class_name(tested_function)
        package_name = parse_package_name(tested_function)
        test_data = prepare_test_data(results)
        try:
            return self.generator.gen_test_class(test_data, class_name, f"{class_name}{TEST_SUFFIX}", package_name)
        except Exception as exc:
            raise CombinerError(
                f"Unexpected error generating test class:\n{exc}",
                CombinerErrorCode.GENERATE_ERROR,
            ) from exc

    def merge_into_test_class(self, existing_class: str, results: List[AnalysisResult]) -> str:
        """Merge results into the source of an existing test class."""
        check_existing_class(existing_class)
        check_results(results)
        test_data = prepare_test_data(results)
        try:
            return self.generator.merge_tests(existing_class, test_data)
        except Exception as exc:
            raise CombinerError(
                f"Unexpected error merging tests:\n{exc}",
                CombinerErrorCode.MERGE_ERROR,
            ) from exc
