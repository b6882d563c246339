"""Results of store tests and their human-readable summaries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .compare import check_string_arrays_equal
from .conversion import FgaObject, UserTypeFilter
from .storedata import ModelTestListUsersAssertion
from .tuples import TupleKey

NO_VALUE_STRING = "N/A"
_FAILURE_MARK = "ⅹ"
_SEPARATOR = "\n---\n"


def _go_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(digit) for digit in digit_tuple)
    prefix = "-" if sign else ""
    point = len(digits) + exponent
    sci = point - 1

    if sci < -4 or sci >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if sci < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(sci):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return prefix + digits + "0" * (point - len(digits))
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _go_value(value: Any) -> str:
    """Render a value the way the default verb of a Go formatter would."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _go_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        members = " ".join(
            f"{key}:{_go_value(value[key])}" for key in sorted(value, key=str)
        )
        return f"map[{members}]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_go_value(item) for item in value) + "]"
    return str(value)


def _context_text(context: dict[str, Any]) -> str:
    return "&" + _go_value(context)


def _string_list_text(values: list[str] | None) -> str:
    return "[" + " ".join(values or []) + "]"


def _assertion_text(assertion: ModelTestListUsersAssertion) -> str:
    return (
        f"{{Users:{_string_list_text(assertion.users)} "
        f"ExcludedUsers:{_string_list_text(assertion.excluded_users)}}}"
    )


def _object_text(obj: FgaObject) -> str:
    return f"{{Type:{obj.type} Id:{obj.id}}}"


def _filter_text(user_filter: UserTypeFilter) -> str:
    relation = "<nil>" if user_filter.relation is None else user_filter.relation
    return f"{{Type:{user_filter.type} Relation:{relation}}}"


@dataclass
class CheckRequest:
    """A Check call: is the user related to the object?"""

    user: str = ""
    relation: str = ""
    object: str = ""
    contextual_tuples: list[TupleKey] = field(default_factory=list)
    context: dict[str, Any] | None = None


@dataclass
class ListObjectsRequest:
    """A ListObjects call: which objects of a type is the user related to?"""

    user: str = ""
    relation: str = ""
    type: str = ""
    contextual_tuples: list[TupleKey] = field(default_factory=list)
    context: dict[str, Any] | None = None


@dataclass
class ListUsersRequest:
    """A ListUsers call: which users are related to the object?"""

    object: FgaObject = field(default_factory=FgaObject)
    relation: str = ""
    user_filters: list[UserTypeFilter] = field(default_factory=list)
    contextual_tuples: list[TupleKey] = field(default_factory=list)
    context: dict[str, Any] | None = None


@dataclass
class CheckSingleResult:
    """The outcome of one Check assertion."""

    request: CheckRequest
    expected: bool
    got: bool | None = None
    error: BaseException | None = None
    test_result: bool = False

    def is_passing(self) -> bool:
        return self.error is None and self.got is not None and self.got == self.expected


@dataclass
class ListObjectsSingleResult:
    """The outcome of one ListObjects assertion."""

    request: ListObjectsRequest
    expected: list[str]
    got: list[str] | None = None
    error: BaseException | None = None
    test_result: bool = False

    def is_passing(self) -> bool:
        return (
            self.error is None
            and self.got is not None
            and check_string_arrays_equal(self.got, self.expected)
        )


@dataclass
class ListUsersSingleResult:
    """The outcome of one ListUsers assertion."""

    request: ListUsersRequest
    expected: ModelTestListUsersAssertion
    got: ModelTestListUsersAssertion = field(default_factory=ModelTestListUsersAssertion)
    error: BaseException | None = None
    test_result: bool = False

    def is_passing(self) -> bool:
        return (
            self.error is None
            and check_string_arrays_equal(self.got.users, self.expected.users)
            and check_string_arrays_equal(
                self.got.excluded_users, self.expected.excluded_users
            )
        )


def _check_failures(results: list[CheckSingleResult]) -> tuple[int, str]:
    failed = 0
    output = ""
    for result in results:
        if result.is_passing():
            continue
        failed += 1
        got = NO_VALUE_STRING if result.got is None else _go_value(result.got)
        request = result.request
        output += (
            f"\n{_FAILURE_MARK} Check(user={request.user},relation={request.relation},"
            f"object={request.object}"
        )
        if request.context is not None:
            output += f", context:{_context_text(request.context)}"
        output += f"): expected={_go_value(result.expected)}, got={got}"
        if result.error is not None:
            output += f", error={result.error}"
    return failed, output


def _list_objects_failures(results: list[ListObjectsSingleResult]) -> tuple[int, str]:
    failed = 0
    output = ""
    for result in results:
        if result.is_passing():
            continue
        failed += 1
        got = NO_VALUE_STRING if result.got is None else _string_list_text(result.got)
        request = result.request
        output += (
            f"\n{_FAILURE_MARK} ListObjects(user={request.user},relation={request.relation},"
            f"type={request.type}"
        )
        if request.context is not None:
            output += f", context:{_context_text(request.context)}"
        output += f"): expected={_string_list_text(result.expected)}, got={got}"
        if result.error is not None:
            output += f", error={result.error}"
    return failed, output


def _list_users_failures(results: list[ListUsersSingleResult]) -> tuple[int, str]:
    failed = 0
    output = ""
    for result in results:
        if result.is_passing():
            continue
        failed += 1
        got = NO_VALUE_STRING
        if result.got.users is not None or result.got.excluded_users is not None:
            got = _assertion_text(result.got)
        request = result.request
        user_filter = request.user_filters[0] if request.user_filters else UserTypeFilter()
        output += (
            f"\n{_FAILURE_MARK} ListUsers(object={_object_text(request.object)},"
            f"relation={request.relation},user_filter={_filter_text(user_filter)}"
        )
        if request.context is not None:
            output += f", context:{_context_text(request.context)}"
        output += f"): expected={_assertion_text(result.expected)}, got={got}"
        if result.error is not None:
            output += f", error={result.error}"
    return failed, output


@dataclass
class TestResult:
    """All assertion outcomes of one named test."""

    __test__ = False

    name: str = ""
    description: str = ""
    check_results: list[CheckSingleResult] = field(default_factory=list)
    list_objects_results: list[ListObjectsSingleResult] = field(default_factory=list)
    list_users_results: list[ListUsersSingleResult] = field(default_factory=list)

    def is_passing(self) -> bool:
        """Return whether every assertion of the test passed."""
        return (
            all(result.is_passing() for result in self.check_results)
            and all(result.is_passing() for result in self.list_objects_results)
            and all(result.is_passing() for result in self.list_users_results)
        )

    def friendly_failures_display(self) -> str:
        """Describe the failing assertions; empty when everything passed."""
        total_check = len(self.check_results)
        total_list_objects = len(self.list_objects_results)
        total_list_users = len(self.list_users_results)

        failed_check, check_output = _check_failures(self.check_results)
        failed_list_objects, list_objects_output = _list_objects_failures(
            self.list_objects_results
        )
        failed_list_users, list_users_output = _list_users_failures(self.list_users_results)

        if failed_check + failed_list_objects + failed_list_users == 0:
            return ""

        output = f"(FAILING) {self.name}: "
        if total_check > 0:
            output += f"Checks ({total_check - failed_check}/{total_check} passing)"
        if total_check > 0 and total_list_objects > 0:
            output += " | "
        if total_list_objects > 0:
            output += (
                f"ListObjects ({total_list_objects - failed_list_objects}/"
                f"{total_list_objects} passing)"
            )
        if total_list_objects > 0 and total_list_users > 0:
            output += " | "
        if total_list_users > 0:
            output += (
                f"ListUsers({total_list_users - failed_list_users}/"
                f"{total_list_users} passing)"
            )
        if failed_check > 0:
            output += check_output
        if failed_list_objects > 0:
            output += list_objects_output
        if failed_list_users > 0:
            output += list_users_output
        return output


@dataclass
class TestResults:
    """The results of a whole test suite."""

    __test__ = False

    results: list[TestResult] = field(default_factory=list)

    def is_passing(self) -> bool:
        """Return whether every test in the suite passed."""
        return all(result.is_passing() for result in self.results)

    def friendly_display(self) -> str:
        """Describe the failures followed by a summary of passing counts."""
        failures = [
            result.friendly_failures_display()
            for result in self.results
            if not result.is_passing()
        ]
        summary = _SEPARATOR.join(failures)

        total_tests = len(self.results)
        if total_tests == 0:
            return summary

        failed_tests = sum(1 for result in self.results if not result.is_passing())
        total_check = sum(len(result.check_results) for result in self.results)
        failed_check = sum(
            1
            for result in self.results
            for check in result.check_results
            if not check.is_passing()
        )
        total_list_objects = sum(len(result.list_objects_results) for result in self.results)
        failed_list_objects = sum(
            1
            for result in self.results
            for item in result.list_objects_results
            if not item.is_passing()
        )
        total_list_users = sum(len(result.list_users_results) for result in self.results)
        failed_list_users = sum(
            1
            for result in self.results
            for item in result.list_users_results
            if not item.is_passing()
        )

        if failed_tests > 0:
            summary += _SEPARATOR
        summary += (
            f"# Test Summary #\nTests {total_tests - failed_tests}/{total_tests} passing"
        )
        if total_check > 0:
            summary += f"\nChecks {total_check - failed_check}/{total_check} passing"
        if total_list_objects > 0:
            summary += (
                f"\nListObjects {total_list_objects - failed_list_objects}/"
                f"{total_list_objects} passing"
            )
        if total_list_users > 0:
            summary += (
                f"\nListUsers {total_list_users - failed_list_users}/"
                f"{total_list_users} passing"
            )
        return summary