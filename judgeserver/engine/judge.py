"""Main class for judging programs against test cases."""
import asyncio
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .program import scoped_program
from .results import JudgeReport, TestCase, TestResult, Verdict
from .sandbox import ExecutionState, SandboxInterface

DEFAULT_TIMEOUT_MS = 5000

# whitespace at either end, byte order marks included
_EDGE_SPACE = re.compile(r'^[\s\ufeff]+|[\s\ufeff]+\Z')


def trim_output(text: str) -> str:
    return _EDGE_SPACE.sub('', text)


def _validate_timeout(timeout_ms: int):
    if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be a positive integer, got {timeout_ms!r}")


class JudgeEngine:
    """
    Runs one program against a list of test cases, each in its own sandboxed execution.

    Test cases are run one after another unless ``max_workers`` is greater than 1, in which
    case at most ``max_workers`` executions run at once. Results always keep input order.
    """

    def __init__(self,
                 sandbox: SandboxInterface,
                 logger: logging.Logger,
                 timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 max_workers: int = 1):
        _validate_timeout(timeout_ms)
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.sandbox = sandbox
        self.logger = logger
        self.timeout_ms = timeout_ms
        self.max_workers = max_workers

    async def run_test_case(self,
                            program: Path,
                            test_case: TestCase,
                            timeout_ms: Optional[int] = None) -> TestResult:
        """Judges a single test case. Never raises; every failure becomes a failed result."""
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        _validate_timeout(timeout_ms)
        try:
            return await self._run_test_case_inner(program, test_case, timeout_ms)
        except Exception:
            self.logger.error("Error while running test case '%s'", test_case.id, exc_info=True)
            return TestResult(test_case_id=test_case.id,
                              passed=False,
                              verdict=Verdict.EXECUTION_ERROR,
                              input=test_case.input,
                              error='Execution error')

    async def _run_test_case_inner(self, program: Path, test_case: TestCase, timeout_ms: int) -> TestResult:
        try:
            handle = await self.sandbox.start(program, test_case.input.encode('utf-8'))
        except SandboxInterface.LaunchError as e:
            self.logger.error("Cannot launch '%s' for test case '%s': %s", program.name, test_case.id, e)
            return TestResult(test_case_id=test_case.id,
                              passed=False,
                              verdict=Verdict.LAUNCH_FAILURE,
                              input=test_case.input,
                              error=str(e))

        try:
            outcome = await self.sandbox.await_result(handle, timeout_ms / 1000)
        finally:
            # a result that was never collected must not leave a process behind
            if handle.state == ExecutionState.RUNNING:
                await self.sandbox.kill(handle)

        if outcome.state == ExecutionState.TIMED_OUT:
            self.logger.info("Test case '%s' timed out after %s ms", test_case.id, timeout_ms)
            return TestResult(test_case_id=test_case.id,
                              passed=False,
                              verdict=Verdict.TIMEOUT,
                              input=test_case.input,
                              error=f'Time limit exceeded ({timeout_ms} ms)')

        if outcome.exit_code != 0:
            self.logger.info("Test case '%s' exited with code %s", test_case.id, outcome.exit_code)
            return TestResult(test_case_id=test_case.id,
                              passed=False,
                              verdict=Verdict.RUNTIME_FAILURE,
                              input=test_case.input,
                              error=outcome.stderr or f'Process exited with code {outcome.exit_code}')

        actual_output = trim_output(outcome.stdout)
        expected_output = trim_output(test_case.expected_output)
        passed = actual_output == expected_output
        self.logger.debug("Test case '%s': expected %r, actual %r", test_case.id, expected_output, actual_output)
        return TestResult(test_case_id=test_case.id,
                          passed=passed,
                          verdict=Verdict.PASSED if passed else Verdict.WRONG_ANSWER,
                          actual_output=actual_output,
                          expected_output=expected_output,
                          input=test_case.input)

    async def judge(self,
                    program: Path,
                    test_cases: Sequence[TestCase],
                    timeout_ms: Optional[int] = None) -> JudgeReport:
        """Judges all test cases and aggregates the results in input order."""
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        _validate_timeout(timeout_ms)
        start = datetime.now()

        if self.max_workers == 1:
            results = []
            for test_case in test_cases:
                results.append(await self.run_test_case(program, test_case, timeout_ms))
        else:
            semaphore = asyncio.Semaphore(self.max_workers)

            async def bounded(test_case: TestCase) -> TestResult:
                async with semaphore:
                    return await self.run_test_case(program, test_case, timeout_ms)

            results = list(await asyncio.gather(*(bounded(t) for t in test_cases)))

        report = JudgeReport.from_results(results)
        self.logger.info("Judging '%s' finished with score %s in %s",
                         program.name, report.score, datetime.now() - start)
        return report

    async def judge_source(self,
                           source: bytes,
                           test_cases: Sequence[TestCase],
                           directory: Path,
                           timeout_ms: Optional[int] = None) -> JudgeReport:
        """Judges program text; the temporary program file is removed however judging ends."""
        with scoped_program(source, directory) as program:
            return await self.judge(program, test_cases, timeout_ms)
