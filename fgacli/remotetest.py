"""Running store tests against a store reached through a client."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .conversion import (
    ObjectOrUserset,
    User,
    object_or_usersets_to_strings,
    store_object_to_object,
    users_to_strings,
)
from .errors import CliError
from .storedata import (
    ModelTest,
    ModelTestCheck,
    ModelTestListObjects,
    ModelTestListUsers,
    ModelTestListUsersAssertion,
    StoreData,
)
from .testresult import (
    CheckRequest,
    CheckSingleResult,
    ListObjectsRequest,
    ListObjectsSingleResult,
    ListUsersRequest,
    ListUsersSingleResult,
    TestResult,
    TestResults,
)
from .tuples import TupleKey


class FgaClient(Protocol):
    """The calls the test runner makes; failures are raised as exceptions."""

    def check(self, request: CheckRequest) -> bool | None:
        """Return whether the request is allowed."""

    def list_objects(self, request: ListObjectsRequest) -> list[str] | None:
        """Return the objects the user is related to."""

    def list_users(
        self, request: ListUsersRequest
    ) -> tuple[Sequence[User], Sequence[ObjectOrUserset]] | None:
        """Return the related users and the excluded users."""


def run_single_remote_check_test(
    client: FgaClient, request: CheckRequest, expectation: bool
) -> CheckSingleResult:
    """Run one Check call and compare it with the expectation."""
    result = CheckSingleResult(request=request, expected=expectation)
    try:
        allowed = client.check(request)
    except Exception as exc:  # the failure is part of the reported result
        result.error = exc
        return result
    if allowed is not None:
        result.got = bool(allowed)
        result.test_result = result.is_passing()
    return result


def run_remote_check_test(
    client: FgaClient, check_test: ModelTestCheck, tuples: Sequence[TupleKey]
) -> list[CheckSingleResult]:
    """Run every Check assertion of ``check_test``."""
    return [
        run_single_remote_check_test(
            client,
            CheckRequest(
                user=check_test.user,
                relation=relation,
                object=check_test.object,
                contextual_tuples=list(tuples),
                context=check_test.context,
            ),
            expectation,
        )
        for relation, expectation in check_test.assertions.items()
    ]


def run_single_remote_list_objects_test(
    client: FgaClient, request: ListObjectsRequest, expectation: list[str]
) -> ListObjectsSingleResult:
    """Run one ListObjects call and compare it with the expectation."""
    result = ListObjectsSingleResult(request=request, expected=expectation)
    try:
        objects = client.list_objects(request)
    except Exception as exc:  # the failure is part of the reported result
        result.error = exc
        return result
    if objects is not None:
        result.got = list(objects)
        result.test_result = result.is_passing()
    return result


def run_remote_list_objects_test(
    client: FgaClient,
    list_objects_test: ModelTestListObjects,
    tuples: Sequence[TupleKey],
) -> list[ListObjectsSingleResult]:
    """Run every ListObjects assertion of ``list_objects_test``."""
    return [
        run_single_remote_list_objects_test(
            client,
            ListObjectsRequest(
                user=list_objects_test.user,
                relation=relation,
                type=list_objects_test.type,
                contextual_tuples=list(tuples),
                context=list_objects_test.context,
            ),
            expectation,
        )
        for relation, expectation in list_objects_test.assertions.items()
    ]


def run_single_remote_list_users_test(
    client: FgaClient,
    request: ListUsersRequest,
    expectation: ModelTestListUsersAssertion,
) -> ListUsersSingleResult:
    """Run one ListUsers call and compare it with the expectation."""
    result = ListUsersSingleResult(request=request, expected=expectation)
    try:
        response = client.list_users(request)
    except Exception as exc:  # the failure is part of the reported result
        result.error = exc
        return result
    if response is not None:
        users, excluded = response
        result.got = ModelTestListUsersAssertion(
            users=users_to_strings(users),
            excluded_users=object_or_usersets_to_strings(excluded),
        )
        result.test_result = result.is_passing()
    return result


def run_remote_list_users_test(
    client: FgaClient,
    list_users_test: ModelTestListUsers,
    tuples: Sequence[TupleKey],
) -> list[ListUsersSingleResult]:
    """Run every ListUsers assertion of ``list_users_test``."""
    target = store_object_to_object(list_users_test.object)
    return [
        run_single_remote_list_users_test(
            client,
            ListUsersRequest(
                object=target,
                relation=relation,
                user_filters=list(list_users_test.user_filter),
                contextual_tuples=list(tuples),
                context=list_users_test.context,
            ),
            expectation,
        )
        for relation, expectation in list_users_test.assertions.items()
    ]


def run_remote_test(
    client: FgaClient, test: ModelTest, tuples: Sequence[TupleKey]
) -> TestResult:
    """Run all assertions of one test, sending ``tuples`` as contextual tuples."""
    return TestResult(
        name=test.name,
        description=test.description,
        check_results=[
            result
            for check in test.check
            for result in run_remote_check_test(client, check, tuples)
        ],
        list_objects_results=[
            result
            for item in test.list_objects
            for result in run_remote_list_objects_test(client, item, tuples)
        ],
        list_users_results=[
            result
            for item in test.list_users
            for result in run_remote_list_users_test(client, item, tuples)
        ],
    )


def run_test(
    client: FgaClient, test: ModelTest, global_tuples: Sequence[TupleKey]
) -> TestResult:
    """Run one test with the global tuples followed by the test's own tuples."""
    return run_remote_test(client, test, [*global_tuples, *test.tuples])


def run_tests(client: FgaClient, store_data: StoreData) -> TestResults:
    """Run every test of a store file against the store behind ``client``."""
    if store_data.model != "":
        raise CliError(
            "store files that define a model need a local evaluation server, "
            "which is not available; remove the model to test against the configured store"
        )
    return TestResults(
        results=[run_test(client, test, store_data.tuples) for test in store_data.tests]
    )