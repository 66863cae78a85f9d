"""Data passed into and returned from the judge engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Verdict(Enum):
    """Kind of outcome of a single test case. Every kind except PASSED scores as a failed case."""
    PASSED = 'passed'
    WRONG_ANSWER = 'wrong_answer'
    RUNTIME_FAILURE = 'runtime_failure'
    TIMEOUT = 'timeout'
    LAUNCH_FAILURE = 'launch_failure'
    EXECUTION_ERROR = 'execution_error'


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    id: str
    input: str
    expected_output: str


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    test_case_id: str
    passed: bool
    verdict: Verdict
    actual_output: Optional[str] = None
    expected_output: Optional[str] = None
    input: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            'testCaseId': self.test_case_id,
            'passed': self.passed,
            'verdict': self.verdict.value,
            'actualOutput': self.actual_output,
            'expectedOutput': self.expected_output,
            'input': self.input,
            'error': self.error,
        }
        return {key: val for key, val in data.items() if val is not None}


@dataclass(frozen=True)
class JudgeReport:
    passed_count: int
    total_count: int
    results: tuple[TestResult, ...] = field(default_factory=tuple)

    @classmethod
    def from_results(cls, results: list[TestResult]) -> 'JudgeReport':
        return cls(passed_count=sum(1 for r in results if r.passed),
                   total_count=len(results),
                   results=tuple(results))

    @property
    def score(self) -> str:
        return f'{self.passed_count}/{self.total_count}'

    @property
    def solved(self) -> bool:
        """A problem counts as solved only if every one of its (at least one) test cases passed."""
        return self.total_count > 0 and self.passed_count == self.total_count

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'passedCount': self.passed_count,
            'totalCount': self.total_count,
            'results': [r.to_dict() for r in self.results],
        }
