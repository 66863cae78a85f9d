from .judge import JudgeEngine
from .results import TestCase, TestResult, JudgeReport, Verdict
from .sandbox import SandboxInterface, ProcessSandbox, ExecutionHandle, ExecutionState, Outcome
from .store import TestCaseStoreInterface, YamlTestCaseStore, SupabaseTestCaseStore
from .program import scoped_program

__all__ = [
    'JudgeEngine',
    'TestCase',
    'TestResult',
    'JudgeReport',
    'Verdict',
    'SandboxInterface',
    'ProcessSandbox',
    'ExecutionHandle',
    'ExecutionState',
    'Outcome',
    'TestCaseStoreInterface',
    'YamlTestCaseStore',
    'SupabaseTestCaseStore',
    'scoped_program',
]
